"""Tests for the Comment Analyzer and its lexicon."""

import json
from datetime import datetime

import pytest
from pydantic import ValidationError

from app.analytics.comments import analyze_comments, classify_sentiment, extract_keywords
from app.analytics.lexicon import DEFAULT_LEXICON, CommentLexicon, get_lexicon, load_lexicon
from app.analytics.types import EvaluationRecord, Sentiment


def _evaluation(evaluation_id: int, when: datetime, comments: str | None) -> EvaluationRecord:
    return EvaluationRecord(
        evaluation_id=evaluation_id,
        evaluator_id=1,
        evaluatee_id=1,
        date_submitted=when,
        comments=comments,
    )


class TestClassifySentiment:
    @pytest.mark.parametrize(
        "text, sentiment",
        [
            ("The course was confusing and the instructor was late", Sentiment.NEGATIVE),
            ("Great and helpful instructor", Sentiment.POSITIVE),
            ("Great lectures but confusing slides, you should add examples", Sentiment.CONSTRUCTIVE),
            ("Great but late", Sentiment.NEUTRAL),
            ("You could post slides earlier", Sentiment.CONSTRUCTIVE),
            ("Lectures on Tuesdays", Sentiment.NEUTRAL),
            ("", Sentiment.NEUTRAL),
            (None, Sentiment.NEUTRAL),
        ],
    )
    def test_rules(self, text, sentiment):
        assert classify_sentiment(text) == sentiment

    def test_case_insensitive(self):
        assert classify_sentiment("EXCELLENT lecturer") == Sentiment.POSITIVE

    def test_substring_matches_count(self):
        # "unclear" contains "clear", so positive and negative tie
        assert classify_sentiment("The grading was unclear") == Sentiment.NEUTRAL

    def test_repeated_keyword_counts_once(self):
        # one distinct positive word against two distinct negative words
        assert classify_sentiment("good good good but boring and slow") == Sentiment.NEGATIVE


class TestExtractKeywords:
    def test_first_occurrence_breaks_ties(self):
        text = "The course was confusing and the instructor was late"
        assert extract_keywords(text) == ["course", "confusing", "instructor"]

    def test_frequency_first(self):
        text = "Slides, slides and more slides! Homework homework. Exams."
        assert extract_keywords(text) == ["slides", "homework", "more"]

    def test_drops_short_tokens_and_stopwords(self):
        assert extract_keywords("It is ok to go, we were there") == ["there"]

    def test_empty(self):
        assert extract_keywords(None) == []
        assert extract_keywords("a an to") == []


class TestAnalyzeComments:
    def test_most_recent_first_and_blank_skipped(self):
        evaluations = [
            _evaluation(1, datetime(2024, 1, 1), "Helpful"),
            _evaluation(2, datetime(2024, 3, 1), "   "),
            _evaluation(3, datetime(2024, 2, 1), "Boring"),
            _evaluation(4, datetime(2024, 2, 1), "Organized"),
            _evaluation(5, datetime(2024, 4, 1), None),
        ]
        insights = analyze_comments(evaluations)
        assert [i.evaluation_id for i in insights] == [3, 4, 1]
        assert [i.sentiment for i in insights] == [Sentiment.NEGATIVE, Sentiment.POSITIVE, Sentiment.POSITIVE]

    def test_limit(self):
        evaluations = [_evaluation(i, datetime(2024, 1, i), f"Comment {i}") for i in range(1, 26)]
        insights = analyze_comments(evaluations)
        assert len(insights) == 20
        assert insights[0].evaluation_id == 25
        assert len(analyze_comments(evaluations, limit=3)) == 3

    def test_to_dict(self):
        (insight,) = analyze_comments([_evaluation(7, datetime(2024, 5, 6, 10, 30), "Great course")])
        assert insight.to_dict() == {
            "evaluation_id": "7",
            "date_submitted": "2024-05-06T10:30:00",
            "text": "Great course",
            "sentiment": "positive",
            "keywords": ["great", "course"],
        }

    def test_custom_lexicon(self):
        lexicon = CommentLexicon(positive=("stellar",), negative=(), constructive=())
        (insight,) = analyze_comments([_evaluation(1, datetime(2024, 1, 1), "Stellar but great")], lexicon)
        assert insight.sentiment == Sentiment.POSITIVE
        assert classify_sentiment("great", lexicon) == Sentiment.NEUTRAL


class TestLexicon:
    def test_load_from_file_keeps_missing_defaults(self, tmp_path):
        path = tmp_path / "lexicon.json"
        path.write_text(json.dumps({"positive": ["stellar"], "stopwords": ["course"]}), encoding="utf-8")

        lexicon = load_lexicon(path)
        assert lexicon.positive == ("stellar",)
        assert lexicon.negative == DEFAULT_LEXICON.negative
        assert extract_keywords("The course notes", lexicon) == ["the", "notes"]

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "lexicon.json"
        path.write_text(json.dumps({"positiv": ["typo"]}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_lexicon(path)

    def test_default_when_unconfigured(self):
        assert get_lexicon("") is DEFAULT_LEXICON
