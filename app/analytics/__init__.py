"""Per-instructor Evaluation Analytics Engine.

Staged, in-memory pipeline over an already-fetched snapshot of rows:
  1. Filter & Dedup
  2. Score Computation (weighted, stored-score fallback)
  3. Aggregation (topline, categories, questions, ranking)
  4. Trend Analyzer (academic terms)
  5. Comment Analyzer (keyword sentiment + keywords)
  6. Data Quality Auditor
  7. Summary Composer

Input:  ProfessorProfile + EvaluationRecord[] + ResponseRecord[]
Output: AnalyticsResult (human_summary, json_output, chart_datasets)
        or a tagged failure (InputNotFound / InvalidFilter)
"""
