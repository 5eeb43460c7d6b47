"""Shared fixtures: sample students and a fake Gemini client."""

import json

import pytest

from app.models import Assessment, EngagementMetric, RiskTier, Student


SAMPLE_ANALYSIS = {
    "riskDrivers": ["Low attendance", "Declining quiz scores", "Missing assignments"],
    "weakTopics": [
        {"topic": "Calculus II", "confidence": 82, "reasoning": "Midterm score of 40/100"},
    ],
    "interventionPlan": [
        {
            "type": "Academic",
            "description": "Weekly calculus tutoring",
            "resources": ["Khan Academy: Integrals", "Tutoring centre"],
            "priority": "High",
        },
        {
            "type": "Behavioral",
            "description": "Attendance check-in with advisor",
            "resources": [],
            "priority": "Medium",
        },
    ],
    "predictedOutcome": "Likely to fail Calculus II without support.",
}


def make_student(
    student_id: str = "STD-2024001",
    name: str = "Student B1",
    tier: RiskTier = RiskTier.HIGH,
    risk_score: float = 72.5,
    attendance: float = 58.0,
    grade: float = 61.0,
    assessments=None,
) -> Student:
    """Build a student with sensible defaults for tests."""
    if assessments is None:
        assessments = [
            Assessment(id="A1-1", name="Midterm Exam", type="Exam", score=40, max_score=100,
                       topic="Calculus II", date="2024-03-15"),
            Assessment(id="A3-1", name="Quiz 3", type="Quiz", score=15, max_score=20,
                       topic="Data Structures", date="2024-04-10"),
        ]
    return Student(
        id=student_id,
        name=name,
        email=f"{name.lower().replace(' ', '')}@university.edu",
        cohort="CS-2025-A",
        attendance_rate=attendance,
        overall_grade=grade,
        risk_tier=tier,
        risk_score=risk_score,
        assessments=assessments,
        engagement=EngagementMetric(
            lms_login_frequency=3,
            avg_session_duration=45,
            assignments_submitted=6,
            assignments_total=10,
            video_watch_percentage=40,
        ),
    )


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeGeminiModel:
    """Stands in for ``genai.GenerativeModel``; records every call."""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, prompt, generation_config=None):
        self.calls.append({'prompt': prompt, 'generation_config': generation_config})
        if self.error is not None:
            raise self.error
        return FakeResponse(self.text)


@pytest.fixture
def student() -> Student:
    return make_student()


@pytest.fixture
def analysis_json() -> str:
    return json.dumps(SAMPLE_ANALYSIS)


@pytest.fixture
def fake_model(analysis_json) -> FakeGeminiModel:
    return FakeGeminiModel(text=analysis_json)
