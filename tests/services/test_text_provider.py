"""Tests for TextProvider: remote quote fallbacks, local corpus and vocabulary passages."""

import random
from typing import Any, List
from unittest.mock import MagicMock

import pytest
import requests

from models.text_corpus import COMMON_WORDS, DEFAULT_SENTENCE, LOCAL_CORPUS
from models.vocabulary import VocabularyOptions
from services.text_provider import (
    DEFAULT_QUOTE_ENDPOINTS,
    TextProvider,
    TextProviderConfig,
    TextSourceUnavailable,
    extract_quote,
    trim_words,
)


def response(payload: Any = None, *, status_error: bool = False, bad_json: bool = False) -> MagicMock:
    resp = MagicMock()
    if status_error:
        resp.raise_for_status.side_effect = requests.HTTPError("503 Service Unavailable")
    if bad_json:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = payload
    return resp


def provider_with(responses: List[Any]) -> TextProvider:
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = responses
    return TextProvider(session=session, rng=random.Random(11))


class TestExtractQuote:
    @pytest.mark.parametrize(
        "payload",
        [
            {"content": "Stay hungry."},
            {"quote": "Stay hungry."},
            [{"q": "Stay hungry.", "a": "Jobs"}],
            {"text": "  Stay hungry.  "},
            "Stay hungry.",
        ],
    )
    def test_known_shapes(self, payload: Any) -> None:
        assert extract_quote(payload) == "Stay hungry."

    @pytest.mark.parametrize("payload", [{}, {"author": "x"}, [], [{"q": "a"}, {"q": "b"}], "  ", None, 42])
    def test_unusable_shapes(self, payload: Any) -> None:
        assert extract_quote(payload) is None


def test_trim_words_collapses_whitespace() -> None:
    assert trim_words("one  two\nthree\tfour", 3) == "one two three"
    assert trim_words("short", 10) == "short"


class TestRemoteQuotes:
    def test_first_endpoint_success(self) -> None:
        provider = provider_with([response({"content": "Simplicity is prerequisite for reliability."})])
        assert provider.generate_text("quotes", "medium") == "Simplicity is prerequisite for reliability."
        url = provider.session.get.call_args.args[0]
        assert url == DEFAULT_QUOTE_ENDPOINTS[0]
        assert provider.session.get.call_args.kwargs["timeout"] == 3.0

    def test_falls_through_failing_endpoints(self) -> None:
        provider = provider_with(
            [
                requests.ConnectionError("down"),
                response(status_error=True),
                response([{"q": "Third time lucky."}]),
            ]
        )
        assert provider.fetch_remote_quote() == "Third time lucky."
        assert [c.args[0] for c in provider.session.get.call_args_list] == list(DEFAULT_QUOTE_ENDPOINTS)

    def test_bad_json_and_empty_payload_are_skipped(self) -> None:
        provider = provider_with([response(bad_json=True), response({}), response({"quote": "Fine."})])
        assert provider.fetch_remote_quote() == "Fine."

    def test_all_endpoints_failing_raises(self) -> None:
        provider = provider_with([requests.Timeout("slow")] * 3)
        with pytest.raises(TextSourceUnavailable):
            provider.fetch_remote_quote()

    def test_all_endpoints_failing_uses_local_quotes(self, caplog) -> None:
        provider = provider_with([requests.Timeout("slow")] * 3)
        text = provider.generate_text("quotes", "long")
        assert text in LOCAL_CORPUS["quotes"]
        assert "Remote quotes unavailable" in caplog.text

    def test_remote_quote_is_trimmed_to_tier(self) -> None:
        long_quote = " ".join(f"w{i}" for i in range(40))
        provider = provider_with([response({"content": long_quote})])
        assert len(provider.generate_text("quotes", "short").split()) == 15

    def test_custom_endpoints_and_timeout(self) -> None:
        session = MagicMock(spec=requests.Session)
        session.get.return_value = response({"content": "Custom."})
        config = TextProviderConfig(quote_endpoints=("http://quotes.local/random",), timeout=0.5)
        provider = TextProvider(config, session=session)
        assert provider.generate_text() == "Custom."
        session.get.assert_called_once_with(
            "http://quotes.local/random", headers={"Accept": "application/json"}, timeout=0.5
        )


class TestLocalSources:
    @pytest.mark.parametrize("source", ["programming", "lorem", "sentences"])
    def test_local_sources_never_touch_the_network(self, source: str) -> None:
        provider = provider_with([])
        text = provider.generate_text(source, "long")
        assert text in LOCAL_CORPUS[source]
        provider.session.get.assert_not_called()

    @pytest.mark.parametrize("tier,expected", [("short", 15), ("medium", 30), ("long", 60)])
    def test_words_source_draws_distinct_common_words(self, tier: str, expected: int) -> None:
        provider = provider_with([])
        words = provider.generate_text("words", tier).split(" ")
        assert len(words) == expected
        assert len(set(words)) == expected
        assert set(words) <= set(COMMON_WORDS)

    def test_unknown_source_uses_quotes_corpus(self) -> None:
        provider = provider_with([])
        assert provider.local_text("poetry", "long") in LOCAL_CORPUS["quotes"]

    def test_short_tier_trims_local_text(self) -> None:
        provider = provider_with([])
        for _ in range(10):
            assert len(provider.generate_text("programming", "short").split()) <= 15


class TestVocabularySource:
    def test_length_tier_drives_composition(self) -> None:
        provider = provider_with([])
        text = provider.generate_text("vocabulary", "short")
        assert any(text == w.example for w in provider.catalog.words)
        provider.session.get.assert_not_called()

    def test_options_filter_the_word(self) -> None:
        provider = provider_with([])
        options = VocabularyOptions(difficulty="easy", category="speech")
        text = provider.generate_text("vocabulary", "long", options)
        assert text.startswith("Her eloquent speech moved everyone in the audience.")
        assert text.endswith("This easy vocabulary word is often used in speech-related contexts.")

    def test_explicit_option_length_wins(self) -> None:
        provider = provider_with([])
        options = VocabularyOptions(difficulty="easy", category="speech", length="short")
        assert provider.generate_text("vocabulary", "long", options) == (
            "Her eloquent speech moved everyone in the audience."
        )


def test_unexpected_failure_returns_default_sentence(caplog) -> None:
    provider = provider_with([])
    provider.catalog = MagicMock()
    provider.catalog.generate_vocabulary_text.side_effect = RuntimeError("boom")
    assert provider.generate_text("vocabulary", "medium") == DEFAULT_SENTENCE
    assert "Text generation failed" in caplog.text


def test_invalid_length_returns_default_sentence() -> None:
    assert provider_with([]).generate_text("lorem", "gigantic") == DEFAULT_SENTENCE


def test_sources_lists_vocabulary() -> None:
    ids = [s.id for s in provider_with([]).sources()]
    assert ids[0] == "quotes"
    assert "vocabulary" in ids
