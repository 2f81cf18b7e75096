"""Pydantic response models for professor analytics."""

from pydantic import BaseModel, ConfigDict, Field


class ProfessorOut(BaseModel):
    user_id: str
    full_name: str
    department: str | None = None
    course_ids: list[int] = Field(default_factory=list)


class ToplineOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    evaluations_count: int = Field(ge=0)
    overall_average: float | None = None
    median: float | None = None
    min: float | None = None
    max: float | None = None
    stddev: float | None = None
    moe_95: float | None = Field(default=None, alias="95_moe", description="95% margin of error")
    performance_label: str


class CategoryOut(BaseModel):
    category_id: str
    name: str
    avg_score: float | None = None
    responses: int = Field(ge=0)
    stddev: float | None = None
    performance_label: str
    low_sample: bool


class QuestionOut(BaseModel):
    question_id: str
    text: str
    avg_rating: float | None = None
    stddev: float | None = None
    responses: int = Field(ge=0)
    pct_below_3: float | None = Field(default=None, ge=0, le=100)
    pct_ge_4_5: float | None = Field(default=None, ge=0, le=100)


class TrendOut(BaseModel):
    semester: str = Field(description='e.g. "Fall 2024"')
    avg_score: float | None = None
    evaluations: int = Field(ge=0)


class CommentOut(BaseModel):
    evaluation_id: str
    date_submitted: str
    text: str
    sentiment: str = Field(pattern=r"^(positive|negative|constructive|neutral)$")
    keywords: list[str]


class DataQualityOut(BaseModel):
    evaluations_with_missing_responses: list[str]
    duplicated_evaluation_ids: list[str]
    questions_with_missing_weight: list[str]
    low_sample_categories: list[str]
    low_sample_questions: list[str]


class AnalyticsJsonOutput(BaseModel):
    professor: ProfessorOut
    topline: ToplineOut
    category_breakdown: list[CategoryOut]
    question_stats: list[QuestionOut]
    trend: list[TrendOut]
    top_questions: list[QuestionOut]
    bottom_questions: list[QuestionOut]
    comments: list[CommentOut]
    data_quality: DataQualityOut


class ChartPoint(BaseModel):
    label: str
    value: float | None = None


class ChartDatasets(BaseModel):
    category_bar: list[ChartPoint]
    trend_line: list[ChartPoint]
    detailed_table: list[QuestionOut]


class ProfessorAnalyticsResponse(BaseModel):
    human_summary: str
    json_output: AnalyticsJsonOutput
    chart_datasets: ChartDatasets
