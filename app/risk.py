"""Cohort aggregation: risk distribution, averages and weak topics."""

from typing import Dict, List

import pandas as pd

from app.models import ChartSlice, CohortStats, RiskTier, Student

RISK_COLORS: Dict[RiskTier, str] = {
    RiskTier.LOW: '#10b981',
    RiskTier.MEDIUM: '#f59e0b',
    RiskTier.HIGH: '#f97316',
    RiskTier.CRITICAL: '#ef4444',
}

AT_RISK_TIERS = (RiskTier.HIGH, RiskTier.CRITICAL)


def is_at_risk(tier: RiskTier) -> bool:
    """High and Critical students count as at risk."""
    return tier in AT_RISK_TIERS


def get_risk_color(tier: RiskTier) -> str:
    """Dashboard color for a risk tier."""
    return RISK_COLORS[RiskTier(tier)]


def students_to_frame(students: List[Student]) -> pd.DataFrame:
    """One row per student with the fields the aggregates need."""
    return pd.DataFrame(
        [
            {
                'id': s.id,
                'name': s.name,
                'attendance_rate': s.attendance_rate,
                'overall_grade': s.overall_grade,
                'risk_tier': RiskTier(s.risk_tier),
                'risk_score': s.risk_score,
            }
            for s in students
        ],
        columns=['id', 'name', 'attendance_rate', 'overall_grade', 'risk_tier', 'risk_score'],
    )


def assessments_to_frame(students: List[Student]) -> pd.DataFrame:
    """One row per assessment, with the score as a percentage of the maximum."""
    rows = []
    for s in students:
        for a in s.assessments:
            pct = (a.score / a.max_score * 100.0) if a.max_score else 0.0
            rows.append({'student_id': s.id, 'topic': a.topic, 'score_pct': pct})
    return pd.DataFrame(rows, columns=['student_id', 'topic', 'score_pct'])


def weakest_topics(students: List[Student], limit: int = 3) -> List[str]:
    """
    Rank topics by mean assessment percentage across the cohort.

    Args:
        students: Cohort to aggregate
        limit: Number of topics to return

    Returns:
        Topic names, weakest first (ties broken alphabetically)
    """
    df = assessments_to_frame(students)
    if df.empty:
        return []
    means = df.groupby('topic')['score_pct'].mean().reset_index()
    means = means.sort_values(['score_pct', 'topic'], ascending=[True, True])
    return means['topic'].head(limit).tolist()


def compute_cohort_stats(students: List[Student]) -> CohortStats:
    """Aggregate the cohort into the numbers shown on the dashboard cards."""
    df = students_to_frame(students)
    total = len(df)

    counts = df['risk_tier'].value_counts()
    distribution = {tier: int(counts.get(tier, 0)) for tier in RiskTier}

    # Empty cohorts average to zero rather than NaN
    avg_attendance = float(df['attendance_rate'].mean()) if total else 0.0
    avg_grade = float(df['overall_grade'].mean()) if total else 0.0

    return CohortStats(
        total_students=total,
        risk_distribution=distribution,
        avg_attendance=round(avg_attendance, 1),
        avg_grade=round(avg_grade, 1),
        at_risk_count=sum(distribution[t] for t in AT_RISK_TIERS),
        weakest_topics=weakest_topics(students),
    )


def risk_distribution_chart(stats: CohortStats) -> List[ChartSlice]:
    """Pie chart data, one slice per tier in tier order."""
    return [
        ChartSlice(name=tier, value=stats.risk_distribution.get(tier, 0), color=RISK_COLORS[tier])
        for tier in RiskTier
    ]


def sort_by_risk(students: List[Student]) -> List[Student]:
    """Highest risk score first; ties by name."""
    return sorted(students, key=lambda s: (-s.risk_score, s.name))


def filter_students(students: List[Student], query: str = "") -> List[Student]:
    """Case-insensitive search over name, id and email."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(students)
    return [
        s for s in students
        if needle in s.name.lower() or needle in s.id.lower() or needle in s.email.lower()
    ]
