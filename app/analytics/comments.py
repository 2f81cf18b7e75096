"""Comment Analyzer: Pipeline Step 5.

Lightweight, rule-based processing of free-text comments:
  - Sentiment: keyword hit counts for positive / negative / constructive sets
  - Keywords: top-3 most frequent non-stopword tokens
"""

from __future__ import annotations

import logging
import re
from collections import Counter

from app.analytics.lexicon import DEFAULT_LEXICON, CommentLexicon
from app.analytics.types import CommentInsight, EvaluationRecord, Sentiment

logger = logging.getLogger(__name__)

COMMENT_LIMIT = 20
KEYWORD_LIMIT = 3

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def _count_hits(text: str, words: tuple[str, ...]) -> int:
    """Number of distinct keywords occurring anywhere in ``text``."""
    return sum(1 for w in words if w in text)


def classify_sentiment(text: str | None, lexicon: CommentLexicon = DEFAULT_LEXICON) -> Sentiment:
    """Classify a comment.

    Order matters: negative must strictly outnumber positive to win, so a
    tie between the two falls through to constructive / neutral.
    """
    if not text:
        return Sentiment.NEUTRAL
    lowered = text.lower()
    pos = _count_hits(lowered, lexicon.positive)
    neg = _count_hits(lowered, lexicon.negative)
    cons = _count_hits(lowered, lexicon.constructive)

    if neg > pos and neg >= 1:
        return Sentiment.NEGATIVE
    if pos > neg and pos >= 1:
        return Sentiment.POSITIVE
    if cons >= 1:
        return Sentiment.CONSTRUCTIVE
    return Sentiment.NEUTRAL


def extract_keywords(
    text: str | None,
    lexicon: CommentLexicon = DEFAULT_LEXICON,
    limit: int = KEYWORD_LIMIT,
) -> list[str]:
    """Most frequent tokens (length > 2, not stopwords); first occurrence breaks ties."""
    if not text:
        return []
    tokens = [
        tok
        for tok in _NON_ALNUM.sub(" ", text.lower()).split()
        if len(tok) > 2 and tok not in lexicon.stopwords
    ]
    # Counter.most_common keeps insertion order among equal counts
    return [tok for tok, _ in Counter(tokens).most_common(limit)]


def analyze_comments(
    evaluations: list[EvaluationRecord],
    lexicon: CommentLexicon = DEFAULT_LEXICON,
    limit: int = COMMENT_LIMIT,
) -> list[CommentInsight]:
    """Analyze the ``limit`` most recent non-blank comments."""
    commented = [ev for ev in evaluations if ev.comments and ev.comments.strip()]
    commented.sort(key=lambda ev: ev.evaluation_id)
    commented.sort(key=lambda ev: ev.date_submitted, reverse=True)

    insights = [
        CommentInsight(
            evaluation_id=ev.evaluation_id,
            date_submitted=ev.date_submitted,
            text=ev.comments,
            sentiment=classify_sentiment(ev.comments, lexicon),
            keywords=extract_keywords(ev.comments, lexicon),
        )
        for ev in commented[:limit]
    ]

    logger.debug(
        "Comments: analyzed=%d of %d, sentiments=%s",
        len(insights),
        len(commented),
        dict(Counter(i.sentiment.value for i in insights)),
    )
    return insights
