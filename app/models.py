"""Data models for the EdPulse dashboard."""

from enum import Enum
from typing import Optional, Dict, List, Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RiskTier(str, Enum):
    """Categorical risk label assigned to a student."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Assessment(CamelModel):
    """A single graded piece of work."""
    id: str
    name: str
    type: Literal["Assignment", "Quiz", "Exam", "Project"]
    score: float
    max_score: float
    topic: str
    date: str


class EngagementMetric(CamelModel):
    """LMS engagement figures for one student."""
    lms_login_frequency: float  # logins per week
    avg_session_duration: float  # minutes
    assignments_submitted: int
    assignments_total: int
    video_watch_percentage: float

    @property
    def missing_assignments(self) -> int:
        return self.assignments_total - self.assignments_submitted


class WeakTopic(CamelModel):
    topic: str
    confidence: float  # 0-100
    reasoning: str


class InterventionStep(CamelModel):
    type: Literal["Academic", "Behavioral", "Administrative"]
    description: str
    resources: List[str] = Field(default_factory=list)
    priority: Literal["High", "Medium", "Low"]


class AIStudentAnalysis(CamelModel):
    """Structured analysis returned by the generative model."""
    risk_drivers: List[str]
    weak_topics: List[WeakTopic]
    intervention_plan: List[InterventionStep]
    predicted_outcome: str
    generated_at: str


class Student(CamelModel):
    """A student record as shown on the dashboard."""
    id: str
    name: str
    email: str
    cohort: str
    attendance_rate: float  # percentage 0-100
    overall_grade: float  # percentage 0-100
    risk_tier: RiskTier
    risk_score: float  # 0-100 probability
    assessments: List[Assessment]
    engagement: EngagementMetric
    ai_analysis: Optional[AIStudentAnalysis] = None


class CohortStats(CamelModel):
    """Aggregate statistics for the whole cohort."""
    total_students: int
    risk_distribution: Dict[RiskTier, int]
    avg_attendance: float
    avg_grade: float
    at_risk_count: int
    weakest_topics: List[str]


class ChartSlice(CamelModel):
    """One slice of the risk distribution chart."""
    name: RiskTier
    value: int
    color: str


class GenerateResponse(CamelModel):
    """Response from the demo dataset endpoint."""
    success: bool
    message: str
    total_students: int


class DashboardResponse(CamelModel):
    """Everything the dashboard view needs in one payload."""
    stats: CohortStats
    chart: List[ChartSlice]
    at_risk_students: List[Student]
    insights: str
