"""
Text Provider

Supplies the practice passage for a text source and a length tier. Quotes are
fetched from interchangeable remote quote services, trying each in turn, with
the local corpus as the fallback. Vocabulary passages come from the
vocabulary catalog. A passage is never empty: when nothing else works the
default sentence is returned.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests
from pydantic import BaseModel, ConfigDict, Field

from models.test_result import TextLength
from models.text_corpus import COMMON_WORDS, DEFAULT_SENTENCE, LOCAL_CORPUS, QUOTES, TEXT_SOURCES, TextSource
from models.vocabulary import VocabularyCatalog, VocabularyOptions

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_ENDPOINTS: Tuple[str, ...] = (
    "https://api.quotable.io/random",
    "https://zenquotes.io/api/random",
    "https://api.goprogram.ai/inspiration",
)
QUOTE_FIELDS: Tuple[str, ...] = ("content", "quote", "q", "text")
VOCABULARY_SOURCE = "vocabulary"
QUOTES_SOURCE = "quotes"
WORDS_SOURCE = "words"


class TextSourceUnavailable(Exception):
    """Raised when a remote text service gives no usable passage."""

    def __init__(self, message: str = "Text source unavailable") -> None:
        """Initialize the exception with a message."""
        self.message = message
        super().__init__(self.message)


class TextProviderConfig(BaseModel):
    """Settings for remote text fetching and length trimming."""

    quote_endpoints: Tuple[str, ...] = DEFAULT_QUOTE_ENDPOINTS
    timeout: float = Field(default=3.0, gt=0)
    words_per_tier: Dict[TextLength, int] = Field(
        default_factory=lambda: {TextLength.SHORT: 15, TextLength.MEDIUM: 30, TextLength.LONG: 60}
    )
    common_words_per_tier: Dict[TextLength, int] = Field(
        default_factory=lambda: {TextLength.SHORT: 20, TextLength.MEDIUM: 50, TextLength.LONG: 100}
    )

    model_config = ConfigDict(frozen=True)


def extract_quote(payload: Any) -> Optional[str]:
    """Pull the quote text out of a quote service response body.

    Accepts an object with one of the known fields, a bare string, or a
    one-element list wrapping either.
    """
    if isinstance(payload, list) and len(payload) == 1:
        payload = payload[0]
    if isinstance(payload, str):
        return payload.strip() or None
    if isinstance(payload, dict):
        for field in QUOTE_FIELDS:
            value = payload.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def trim_words(text: str, max_words: int) -> str:
    """Collapse whitespace and cut ``text`` to at most ``max_words`` whole words."""
    words = re.sub(r"\s+", " ", text).strip().split(" ")
    return " ".join(words[:max_words])


class TextProvider:
    """Produce passages by source id and length tier."""

    def __init__(
        self,
        config: Optional[TextProviderConfig] = None,
        *,
        session: Optional[requests.Session] = None,
        catalog: Optional[VocabularyCatalog] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or TextProviderConfig()
        self.session = session or requests.Session()
        self._rng = rng or random.Random()
        self.catalog = catalog or VocabularyCatalog(rng=self._rng)

    def sources(self) -> List[TextSource]:
        """All selectable text sources."""
        return list(TEXT_SOURCES)

    def generate_text(
        self,
        source: str = QUOTES_SOURCE,
        length: TextLength | str = TextLength.MEDIUM,
        vocabulary_options: Optional[VocabularyOptions] = None,
    ) -> str:
        """Return a non-empty passage for ``source`` and ``length``."""
        try:
            tier = TextLength(length)
            if source == VOCABULARY_SOURCE:
                text = self._vocabulary_text(tier, vocabulary_options)
            else:
                text = self._plain_text(source, tier)
        except Exception:
            logger.exception("Text generation failed for source %r; using default sentence", source)
            return DEFAULT_SENTENCE
        if not text:
            logger.warning("Empty passage for source %r; using default sentence", source)
            return DEFAULT_SENTENCE
        return text

    def _vocabulary_text(self, tier: TextLength, options: Optional[VocabularyOptions]) -> str:
        if options is None:
            options = VocabularyOptions(length=tier)
        elif "length" not in options.model_fields_set:
            options = options.model_copy(update={"length": tier.value})
        return self.catalog.generate_vocabulary_text(options).text

    def _plain_text(self, source: str, tier: TextLength) -> str:
        if source == QUOTES_SOURCE:
            try:
                return trim_words(self.fetch_remote_quote(), self.config.words_per_tier[tier])
            except TextSourceUnavailable as e:
                logger.warning("Remote quotes unavailable, using local text: %s", e)
        return self.local_text(source, tier)

    def fetch_remote_quote(self) -> str:
        """Try each quote endpoint in order and return the first usable quote.

        Raises:
            TextSourceUnavailable: If every endpoint failed.
        """
        for url in self.config.quote_endpoints:
            try:
                response = self.session.get(
                    url,
                    headers={"Accept": "application/json"},
                    timeout=self.config.timeout,
                )
                response.raise_for_status()
                quote = extract_quote(response.json())
            except (requests.RequestException, ValueError) as e:
                logger.warning("Quote service %s failed: %s", url, e)
                continue
            if quote:
                return quote
            logger.warning("Quote service %s returned no usable quote", url)
        raise TextSourceUnavailable("All quote services failed")

    def local_text(self, source: str, tier: TextLength | str) -> str:
        """Pick a passage from the local corpus; unknown sources use quotes."""
        tier = TextLength(tier)
        if source == WORDS_SOURCE:
            count = self.config.common_words_per_tier[tier]
            text = " ".join(self._rng.sample(COMMON_WORDS, min(count, len(COMMON_WORDS))))
        else:
            texts: Sequence[str] = LOCAL_CORPUS.get(source, QUOTES)
            text = self._rng.choice(texts)
        return trim_words(text, self.config.words_per_tier[tier])
