from __future__ import annotations

import logging
import re

from .models import KeywordSet
from .wordlists import DEFAULT_WORD_LISTS, WordLists, normalize_text

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


def tokenize(text: str, word_lists: WordLists = DEFAULT_WORD_LISTS) -> list[str]:
    """Normalise *text* and split it into candidate tokens.

    Tokens of one character are dropped, two-character tokens survive only
    when they match the word lists' short-token pattern.
    """
    normalized = _PUNCTUATION_RE.sub(" ", normalize_text(text))
    short_re = word_lists.short_token_re
    tokens: list[str] = []
    for word in normalized.split():
        if len(word) > 2 or (len(word) == 2 and short_re.match(word)):
            tokens.append(word)
    return tokens


def extract_keywords(envie: str | None, word_lists: WordLists = DEFAULT_WORD_LISTS) -> KeywordSet:
    """Classify the tokens of *envie* into primary, context and generic keywords.

    Context words are checked first, then primary (action) words, then stop
    words which are discarded. Anything left is a generic keyword. ``all``
    keeps every non-discarded token in query order.
    """
    if not envie or not envie.strip():
        return KeywordSet()

    all_keywords: list[str] = []
    primary: list[str] = []
    context: list[str] = []
    generic: list[str] = []

    for token in tokenize(envie, word_lists):
        if token in word_lists.context_words:
            context.append(token)
        elif token in word_lists.primary_words:
            primary.append(token)
        elif token in word_lists.stop_words:
            continue
        else:
            generic.append(token)
        all_keywords.append(token)

    keywords = KeywordSet(
        all=tuple(all_keywords),
        primary=tuple(primary),
        context=tuple(context),
        generic=tuple(generic),
    )
    logger.debug(
        "Keywords for %r: primary=%s context=%s generic=%s",
        envie, keywords.primary, keywords.context, keywords.generic,
    )
    return keywords
