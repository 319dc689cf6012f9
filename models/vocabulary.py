"""Vocabulary catalog used for vocabulary practice passages.

The catalog is static: each entry carries a definition, an example sentence,
a difficulty and a category. A word may appear more than once at different
difficulties with a different example.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.test_result import TextLength

logger = logging.getLogger(__name__)


class Difficulty(str, Enum):
    """Difficulty of a catalog word."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


MIXED = "mixed"


class VocabularyWord(BaseModel):
    """One catalog entry."""

    word: str = Field(min_length=1)
    definition: str = Field(min_length=1)
    example: str = Field(min_length=1)
    difficulty: Difficulty
    category: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class VocabularyOptions(BaseModel):
    """Filters and length tier for composing a vocabulary passage.

    ``difficulty`` is one of the catalog difficulties or ``"mixed"``; a missing
    ``category`` means no category filter.
    """

    difficulty: str = MIXED
    category: Optional[str] = None
    length: TextLength = TextLength.MEDIUM

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    @field_validator("difficulty")
    @classmethod
    def validate_difficulty(cls, v: str) -> str:
        allowed = {d.value for d in Difficulty} | {MIXED}
        if v not in allowed:
            raise ValueError(f"difficulty must be one of {sorted(allowed)}")
        return v

    @field_validator("category")
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class VocabularyPassage(BaseModel):
    """A composed passage together with the word it teaches."""

    text: str
    word: VocabularyWord
    explanation: str

    model_config = ConfigDict(frozen=True)


class VocabularySet(BaseModel):
    """Several vocabulary passages joined into one practice text."""

    text: str
    words: List[VocabularyWord]
    explanations: List[str]

    model_config = ConfigDict(frozen=True)


def _entry(word: str, definition: str, example: str, difficulty: str, category: str) -> VocabularyWord:
    return VocabularyWord(
        word=word,
        definition=definition,
        example=example,
        difficulty=Difficulty(difficulty),
        category=category,
    )


DEFAULT_WORDS: tuple[VocabularyWord, ...] = (
    _entry("serendipity", "finding something good without looking for it",
           "Meeting my best friend at that coffee shop was pure serendipity.", "easy", "luck"),
    _entry("ubiquitous", "seeming to be everywhere at the same time",
           "Smartphones have become ubiquitous in modern society.", "easy", "presence"),
    _entry("ephemeral", "lasting for a very short time",
           "The beauty of cherry blossoms is ephemeral, lasting only a few days.", "easy", "time"),
    _entry("mellifluous", "sounding sweet and smooth, like honey",
           "Her mellifluous voice made the song even more beautiful.", "easy", "sound"),
    _entry("perspicacious", "having a clear understanding of things",
           "The detective's perspicacious observations helped solve the case.", "easy", "intelligence"),
    _entry("quintessential", "the perfect example of something",
           "This restaurant is the quintessential Italian dining experience.", "easy", "perfection"),
    _entry("eloquent", "speaking in a clear and beautiful way",
           "Her eloquent speech moved everyone in the audience.", "easy", "speech"),
    _entry("resilient", "able to recover quickly from difficult situations",
           "Children are surprisingly resilient when facing challenges.", "easy", "strength"),
    _entry("authentic", "genuine and real, not fake",
           "The restaurant serves authentic Mexican cuisine.", "easy", "truth"),
    _entry("innovative", "introducing new ideas or methods",
           "The company's innovative approach changed the industry.", "easy", "creativity"),
    _entry("egregious", "something that's outrageously bad or shocking",
           "The company's egregious mistake cost them millions of dollars.", "medium", "bad"),
    _entry("pragmatic", "dealing with things in a practical way",
           "We need a pragmatic solution to this complex problem.", "medium", "practical"),
    _entry("diligent", "working hard and being careful about details",
           "The diligent student always completed her homework on time.", "medium", "work"),
    _entry("concise", "saying what you need to say in few words",
           "Please give me a concise summary of the meeting.", "medium", "communication"),
    _entry("versatile", "able to do many different things well",
           "This versatile tool can be used for multiple purposes.", "medium", "ability"),
    _entry("profound", "having deep meaning or importance",
           "The book had a profound impact on my thinking.", "medium", "depth"),
    _entry("tenacious", "not giving up easily, holding on tightly",
           "Her tenacious spirit helped her overcome many obstacles.", "medium", "persistence"),
    _entry("astute", "clever and good at understanding situations",
           "The astute businessman saw the opportunity before others did.", "medium", "intelligence"),
    _entry("eloquent", "speaking in a clear and beautiful way",
           "His eloquent words inspired the entire crowd.", "medium", "speech"),
    _entry("resilient", "able to bounce back from difficult situations",
           "The resilient community rebuilt after the natural disaster.", "medium", "strength"),
    _entry("surreptitious", "done secretly, trying not to be noticed",
           "He made a surreptitious glance at his watch during the meeting.", "hard", "secrecy"),
    _entry("ubiquitous", "present everywhere at the same time",
           "The ubiquitous nature of social media affects everyone's daily life.", "hard", "presence"),
    _entry("perspicacious", "having a keen understanding and insight",
           "The perspicacious analyst predicted the market crash months in advance.", "hard", "intelligence"),
    _entry("mellifluous", "sweet and smooth sounding, like flowing honey",
           "The mellifluous tones of the violin filled the concert hall.", "hard", "sound"),
    _entry("quintessential", "representing the most perfect example of a quality",
           "This painting is the quintessential representation of the Romantic era.", "hard", "perfection"),
    _entry("ephemeral", "lasting for a very brief period of time",
           "The ephemeral beauty of the sunset lasted only a few minutes.", "hard", "time"),
    _entry("serendipitous", "occurring or discovered by chance in a happy way",
           "Their serendipitous meeting at the airport led to a lifelong friendship.", "hard", "luck"),
    _entry("eloquent", "fluent and persuasive in speech or writing",
           "The eloquent speaker captivated the audience with her powerful words.", "hard", "speech"),
    _entry("resilient", "able to withstand or recover quickly from difficult conditions",
           "The resilient ecosystem adapted to the changing climate.", "hard", "strength"),
    _entry("authentic", "genuine and original, not a copy or imitation",
           "The authentic manuscript revealed new insights about the author's life.", "hard", "truth"),
)


class VocabularyCatalog:
    """Query and compose passages from a fixed list of vocabulary words."""

    def __init__(
        self,
        words: Sequence[VocabularyWord] = DEFAULT_WORDS,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not words:
            raise ValueError("Vocabulary catalog must not be empty")
        self._words: tuple[VocabularyWord, ...] = tuple(words)
        self._rng = rng or random.Random()

    @property
    def words(self) -> tuple[VocabularyWord, ...]:
        return self._words

    def unique_words(self) -> List[str]:
        """Distinct word spellings in catalog order."""
        return list(dict.fromkeys(w.word for w in self._words))

    def categories(self) -> List[str]:
        """Distinct categories, sorted."""
        return sorted({w.category for w in self._words})

    def find(self, word: str) -> Optional[VocabularyWord]:
        """Return the first entry spelled ``word`` (case-insensitive), if any."""
        needle = word.lower()
        for entry in self._words:
            if entry.word.lower() == needle:
                return entry
        return None

    def filter(self, difficulty: str = MIXED, category: Optional[str] = None) -> List[VocabularyWord]:
        """Entries matching the difficulty (exact, or any for ``"mixed"``) and category.

        An empty match falls back to the whole catalog.
        """
        matches = [
            w
            for w in self._words
            if (difficulty == MIXED or w.difficulty == difficulty)
            and (category is None or w.category == category)
        ]
        if not matches:
            logger.debug("No vocabulary for difficulty=%s category=%s; using full catalog", difficulty, category)
            return list(self._words)
        return matches

    def random_word(self) -> VocabularyWord:
        return self._rng.choice(self._words)

    def search(self, query: str) -> List[VocabularyWord]:
        """Entries whose word, definition or category contains ``query``."""
        q = query.lower()
        return [
            w
            for w in self._words
            if q in w.word.lower() or q in w.definition.lower() or q in w.category.lower()
        ]

    def generate_vocabulary_text(self, options: Optional[VocabularyOptions] = None) -> VocabularyPassage:
        """Pick a random matching word and compose a passage for the length tier."""
        options = options or VocabularyOptions()
        entry = self._rng.choice(self.filter(options.difficulty, options.category))
        return VocabularyPassage(
            text=compose_passage(entry, options.length),
            word=entry,
            explanation=f"{entry.word}: {entry.definition}",
        )

    def generate_vocabulary_set(
        self, count: int = 5, options: Optional[VocabularyOptions] = None
    ) -> VocabularySet:
        """Compose ``count`` passages joined by single spaces."""
        if count < 1:
            raise ValueError("count must be at least 1")
        passages = [self.generate_vocabulary_text(options) for _ in range(count)]
        return VocabularySet(
            text=" ".join(p.text for p in passages),
            words=[p.word for p in passages],
            explanations=[p.explanation for p in passages],
        )


def compose_passage(entry: VocabularyWord, length: TextLength | str = TextLength.MEDIUM) -> str:
    """Build the practice text for ``entry`` at the given length tier."""
    length = TextLength(length)
    if length is TextLength.SHORT:
        text = entry.example
    else:
        text = f'{entry.example} The word "{entry.word}" means {entry.definition}.'
        if length is TextLength.LONG:
            text += (
                f" This {entry.difficulty} vocabulary word is often used in "
                f"{entry.category}-related contexts."
            )
    return text.strip()
