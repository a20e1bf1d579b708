"""
Classification word lists for the keyword extractor.

The lists are plain data: they are normalised once (lower case, diacritics
stripped) when a ``WordLists`` value is built, and passed to the extractor
and the scoring engine instead of being read from module globals. A JSON
file with the same keys can replace the French defaults.
"""
from __future__ import annotations

import json
import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping


def normalize_text(text: str | None) -> str:
    """Lower-case *text* and strip combining marks (``théâtre`` -> ``theatre``)."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


DEFAULT_STOP_WORDS = (
    "de", "le", "la", "les", "un", "une", "des", "du", "faire", "découvrir",
    "avec", "mes", "mon", "ma", "pour", "l", "d", "au", "aux", "envie",
    "sortir", "aller", "voir", "trouver", "ai", "as", "a", "et", "ou", "si",
    "on", "il", "je", "tu", "nous", "vous", "ils", "elle", "elles",
)

DEFAULT_CONTEXT_WORDS = (
    "ce", "soir", "demain", "aujourd", "hui", "maintenant", "bientot", "plus",
    "tard", "cet", "cette", "weekend",
)

DEFAULT_PRIMARY_WORDS = (
    "kart", "karting", "bowling", "laser", "escape", "game", "paintball", "tir",
    "archery", "escalade", "piscine", "cinema", "theatre", "concert", "danse",
    "danser", "boire", "manger", "restaurant", "bar", "cafe", "verre",
    "cocktail", "biere", "bieres", "tapas", "burger", "karaoke",
)

DEFAULT_ASSOCIATIONS: dict[str, tuple[str, ...]] = {
    "boire": ("bar", "cocktails", "bieres", "cafe"),
    "verre": ("bar", "cocktails", "bieres", "cafe"),
    "cocktail": ("bar", "cocktails"),
    "cocktails": ("bar", "cocktails"),
    "biere": ("bar", "bieres"),
    "bieres": ("bar", "bieres"),
    "amis": ("bar", "karaoke", "jeux", "ambiance"),
    "soiree": ("bar", "karaoke", "danse", "concert", "dj"),
    "manger": ("restaurant", "burger", "tapas"),
    "burger": ("burger", "restaurant"),
    "tapas": ("tapas", "bar", "restaurant"),
}

DEFAULT_GENERIC_TAG_PHRASES = ("envie de découvrir", "envie de sortir", "envie de détente")
DEFAULT_GENERIC_ACTION_TAG_PHRASES = ("envie de manger", "envie de boire", "envie de faire")

# Two-letter tokens are kept only when purely alphabetic ("vr", "dj").
DEFAULT_SHORT_TOKEN_PATTERN = r"^[a-z]{2}$"


def _normalized(words: Iterable[str]) -> frozenset[str]:
    return frozenset(normalize_text(w) for w in words if w)


@dataclass(frozen=True)
class WordLists:
    stop_words: frozenset[str] = field(default_factory=lambda: _normalized(DEFAULT_STOP_WORDS))
    context_words: frozenset[str] = field(default_factory=lambda: _normalized(DEFAULT_CONTEXT_WORDS))
    primary_words: frozenset[str] = field(default_factory=lambda: _normalized(DEFAULT_PRIMARY_WORDS))
    associations: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: DEFAULT_ASSOCIATIONS)
    generic_tag_phrases: tuple[str, ...] = DEFAULT_GENERIC_TAG_PHRASES
    generic_action_tag_phrases: tuple[str, ...] = DEFAULT_GENERIC_ACTION_TAG_PHRASES
    short_token_pattern: str = DEFAULT_SHORT_TOKEN_PATTERN

    def __post_init__(self) -> None:
        object.__setattr__(self, "stop_words", _normalized(self.stop_words))
        object.__setattr__(self, "context_words", _normalized(self.context_words))
        object.__setattr__(self, "primary_words", _normalized(self.primary_words))
        object.__setattr__(
            self,
            "associations",
            MappingProxyType({
                normalize_text(k): tuple(normalize_text(v) for v in values)
                for k, values in self.associations.items()
            }),
        )
        object.__setattr__(
            self, "generic_tag_phrases", tuple(normalize_text(p) for p in self.generic_tag_phrases),
        )
        object.__setattr__(
            self,
            "generic_action_tag_phrases",
            tuple(normalize_text(p) for p in self.generic_action_tag_phrases),
        )

    @property
    def short_token_re(self) -> re.Pattern[str]:
        return re.compile(self.short_token_pattern)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WordLists":
        """Build word lists from a mapping; missing keys keep the French defaults."""
        defaults = cls()
        return cls(
            stop_words=frozenset(data.get("stop_words", defaults.stop_words)),
            context_words=frozenset(data.get("context_words", defaults.context_words)),
            primary_words=frozenset(data.get("primary_words", defaults.primary_words)),
            associations={
                k: tuple(v) for k, v in data.get("associations", defaults.associations).items()
            },
            generic_tag_phrases=tuple(data.get("generic_tag_phrases", defaults.generic_tag_phrases)),
            generic_action_tag_phrases=tuple(
                data.get("generic_action_tag_phrases", defaults.generic_action_tag_phrases)
            ),
            short_token_pattern=data.get("short_token_pattern", defaults.short_token_pattern),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "WordLists":
        with open(path, encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))


DEFAULT_WORD_LISTS = WordLists()


def load_word_lists(path: str | Path | None = None) -> WordLists:
    """Return word lists from *path*, or the defaults when no path is configured."""
    if not path:
        return DEFAULT_WORD_LISTS
    return WordLists.from_file(path)
