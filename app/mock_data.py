"""Synthetic cohort generator for the demo dataset."""

import logging
from typing import List, Optional

import numpy as np

from app.models import Assessment, EngagementMetric, RiskTier, Student

logger = logging.getLogger(__name__)

MOCK_TOPICS = ["Calculus II", "Data Structures", "Linear Algebra", "Database Systems", "Ethics"]
COHORT_NAME = "CS-2025-A"


def _clamp(value: float, lower: float, upper: float) -> float:
    return float(min(upper, max(lower, value)))


def _mock_assessments(i: int, base_score: float) -> List[Assessment]:
    return [
        Assessment(id=f"A1-{i}", name="Midterm Exam", type="Exam",
                   score=int(np.floor(base_score * 0.9)), max_score=100,
                   topic="Calculus II", date="2024-03-15"),
        Assessment(id=f"A2-{i}", name="SQL Project", type="Project",
                   score=int(np.floor(base_score * 1.1)), max_score=100,
                   topic="Database Systems", date="2024-04-02"),
        Assessment(id=f"A3-{i}", name="Quiz 3", type="Quiz",
                   score=int(np.floor(base_score * 0.85)), max_score=20,
                   topic="Data Structures", date="2024-04-10"),
    ]


def generate_mock_student(i: int, rng: np.random.Generator) -> Student:
    """
    Build one synthetic student.

    Roughly 30% of students are flagged at risk, and 40% of those are
    critical. Every other figure is derived from a base score (45 critical,
    62 at risk, 85 otherwise) plus uniform noise.
    """
    is_risk = rng.random() > 0.7
    is_critical = is_risk and rng.random() > 0.6
    base_score = 45 if is_critical else 62 if is_risk else 85

    attendance = _clamp(base_score + (rng.random() * 20 - 10), 40.0, 100.0)
    grade = _clamp(base_score + (rng.random() * 15 - 7), 30.0, 100.0)

    if is_critical:
        tier = RiskTier.CRITICAL
        risk_score = 85 + rng.random() * 15
    elif is_risk:
        tier = RiskTier.HIGH
        risk_score = 65 + rng.random() * 20
    else:
        tier = RiskTier.MEDIUM if rng.random() > 0.5 else RiskTier.LOW
        risk_score = rng.random() * 30

    return Student(
        id=f"STD-{2024000 + i}",
        name=f"Student {chr(65 + (i % 26))}{i}",
        email=f"student{i}@university.edu",
        cohort=COHORT_NAME,
        attendance_rate=attendance,
        overall_grade=grade,
        risk_tier=tier,
        risk_score=float(risk_score),
        assessments=_mock_assessments(i, base_score),
        engagement=EngagementMetric(
            lms_login_frequency=base_score // 10,
            avg_session_duration=45,
            assignments_submitted=8,
            assignments_total=10,
            video_watch_percentage=base_score,
        ),
    )


def generate_mock_data(count: int = 25, seed: Optional[int] = None) -> List[Student]:
    """Generate a demo cohort. The same seed always yields the same cohort."""
    if count < 0:
        raise ValueError("Student count cannot be negative")
    rng = np.random.default_rng(seed)
    students = [generate_mock_student(i, rng) for i in range(count)]
    logger.info("Generated %d mock students (seed=%s)", len(students), seed)
    return students
