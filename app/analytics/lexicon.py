"""Keyword lists used by the Comment Analyzer.

The built-in lists are small and hand-curated; deployments can replace any
of them with a JSON file (``ANALYTICS_LEXICON_PATH``), e.g.::

    {"positive": ["excellent", "great"], "stopwords": ["the", "and"]}
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class CommentLexicon(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    positive: tuple[str, ...] = (
        "excellent",
        "great",
        "good",
        "helpful",
        "clear",
        "engaging",
        "supportive",
        "organized",
        "outstanding",
        "improved",
    )
    negative: tuple[str, ...] = (
        "poor",
        "bad",
        "confusing",
        "unclear",
        "late",
        "rude",
        "unprepared",
        "boring",
        "inconsistent",
        "slow",
    )
    constructive: tuple[str, ...] = (
        "improve",
        "should",
        "needs",
        "could",
        "suggest",
        "recommend",
        "better",
    )
    stopwords: frozenset[str] = frozenset(
        {
            "the", "is", "and", "a", "an", "to", "of", "in", "for", "on",
            "with", "this", "that", "it", "as", "are", "was", "were", "be",
            "been", "by", "at", "or", "we", "they", "you", "i", "from",
        }
    )  # fmt: skip


DEFAULT_LEXICON = CommentLexicon()


def load_lexicon(path: str | Path) -> CommentLexicon:
    """Load a lexicon JSON file; omitted keys keep their defaults."""
    lexicon = CommentLexicon.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(
        "Loaded comment lexicon from %s (positive=%d, negative=%d, constructive=%d, stopwords=%d)",
        path,
        len(lexicon.positive),
        len(lexicon.negative),
        len(lexicon.constructive),
        len(lexicon.stopwords),
    )
    return lexicon


@lru_cache
def get_lexicon(path: str = "") -> CommentLexicon:
    """Configured lexicon, read once per path."""
    if not path:
        return DEFAULT_LEXICON
    return load_lexicon(path)
