"""Unit tests for cohort aggregation."""

import pytest

from app.models import Assessment, RiskTier
from app.risk import (
    compute_cohort_stats,
    filter_students,
    get_risk_color,
    is_at_risk,
    risk_distribution_chart,
    sort_by_risk,
    weakest_topics,
)
from tests.conftest import make_student


@pytest.fixture
def cohort():
    return [
        make_student("STD-1", "Student A", RiskTier.LOW, 10.0, attendance=90.0, grade=88.0),
        make_student("STD-2", "Student B", RiskTier.CRITICAL, 95.0, attendance=45.0, grade=40.0),
        make_student("STD-3", "Student C", RiskTier.HIGH, 70.0, attendance=60.0, grade=62.0),
        make_student("STD-4", "Student D", RiskTier.HIGH, 70.0, attendance=65.0, grade=66.0),
    ]


def test_is_at_risk():
    """Test only High and Critical count as at risk."""
    assert is_at_risk(RiskTier.CRITICAL) == True
    assert is_at_risk(RiskTier.HIGH) == True
    assert is_at_risk(RiskTier.MEDIUM) == False
    assert is_at_risk(RiskTier.LOW) == False


def test_get_risk_color():
    """Test the dashboard palette."""
    assert get_risk_color(RiskTier.LOW) == '#10b981'
    assert get_risk_color(RiskTier.CRITICAL) == '#ef4444'
    assert get_risk_color("Medium") == '#f59e0b'


def test_compute_cohort_stats(cohort):
    """Test counts and averages over a small cohort."""
    stats = compute_cohort_stats(cohort)

    assert stats.total_students == 4
    assert stats.risk_distribution == {
        RiskTier.LOW: 1,
        RiskTier.MEDIUM: 0,
        RiskTier.HIGH: 2,
        RiskTier.CRITICAL: 1,
    }
    assert stats.at_risk_count == 3
    assert stats.avg_attendance == 65.0
    assert stats.avg_grade == 64.0


def test_compute_cohort_stats_empty():
    """Test an empty cohort yields zeros, not NaN."""
    stats = compute_cohort_stats([])

    assert stats.total_students == 0
    assert stats.avg_attendance == 0.0
    assert stats.avg_grade == 0.0
    assert stats.at_risk_count == 0
    assert stats.weakest_topics == []
    assert all(count == 0 for count in stats.risk_distribution.values())
    assert set(stats.risk_distribution) == set(RiskTier)


def test_weakest_topics_uses_percentage_of_max():
    """Test a quiz out of 20 is compared as a percentage, weakest first."""
    students = [
        make_student("STD-1", assessments=[
            Assessment(id="1", name="Quiz", type="Quiz", score=10, max_score=20,
                       topic="Data Structures", date="2024-04-10"),
            Assessment(id="2", name="Exam", type="Exam", score=80, max_score=100,
                       topic="Calculus II", date="2024-03-15"),
            Assessment(id="3", name="Essay", type="Assignment", score=30, max_score=100,
                       topic="Ethics", date="2024-03-20"),
            Assessment(id="4", name="Project", type="Project", score=70, max_score=100,
                       topic="Database Systems", date="2024-04-02"),
        ]),
    ]

    assert weakest_topics(students) == ["Ethics", "Data Structures", "Database Systems"]
    assert weakest_topics(students, limit=1) == ["Ethics"]


def test_weakest_topics_ignores_zero_max_score():
    """Test a zero max score does not divide by zero."""
    students = [
        make_student("STD-1", assessments=[
            Assessment(id="1", name="Ungraded", type="Assignment", score=5, max_score=0,
                       topic="Ethics", date="2024-03-20"),
        ]),
    ]
    assert weakest_topics(students) == ["Ethics"]


def test_risk_distribution_chart(cohort):
    """Test one slice per tier, in tier order, with colors."""
    chart = risk_distribution_chart(compute_cohort_stats(cohort))

    assert [c.name for c in chart] == [RiskTier.LOW, RiskTier.MEDIUM, RiskTier.HIGH, RiskTier.CRITICAL]
    assert [c.value for c in chart] == [1, 0, 2, 1]
    assert chart[3].color == '#ef4444'


def test_sort_by_risk(cohort):
    """Test descending risk score with ties broken by name."""
    ordered = sort_by_risk(cohort)
    assert [s.id for s in ordered] == ["STD-2", "STD-3", "STD-4", "STD-1"]


def test_filter_students(cohort):
    """Test case-insensitive search on name, id and email."""
    assert [s.id for s in filter_students(cohort, "student b")] == ["STD-2"]
    assert [s.id for s in filter_students(cohort, "std-4")] == ["STD-4"]
    assert [s.id for s in filter_students(cohort, "studentc@")] == ["STD-3"]
    assert len(filter_students(cohort, "")) == 4
    assert len(filter_students(cohort, "   ")) == 4
    assert filter_students(cohort, "nobody") == []
