"""Prompt and response-schema construction for the generative model."""

import textwrap
from typing import Dict, List, Union

from app.models import Student
from app.risk import is_at_risk

SYSTEM_INSTRUCTION = (
    "You are an expert academic advisor and data scientist. "
    "Analyze student performance data to prevent dropout."
)

# Structured JSON output schema for the student analysis
ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "riskDrivers": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of top 3 factors contributing to the student's risk level.",
        },
        "weakTopics": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "topic": {"type": "STRING"},
                    "confidence": {"type": "NUMBER", "description": "0-100 confidence score"},
                    "reasoning": {"type": "STRING"},
                },
            },
            "description": "Identified academic topics where the student is struggling.",
        },
        "interventionPlan": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "type": {
                        "type": "STRING",
                        "format": "enum",
                        "enum": ["Academic", "Behavioral", "Administrative"],
                    },
                    "description": {"type": "STRING"},
                    "resources": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "priority": {
                        "type": "STRING",
                        "format": "enum",
                        "enum": ["High", "Medium", "Low"],
                    },
                },
            },
            "description": "Actionable steps to improve student performance.",
        },
        "predictedOutcome": {
            "type": "STRING",
            "description": "A short predictive statement about the student's trajectory if no action is taken.",
        },
    },
    "required": ["riskDrivers", "weakTopics", "interventionPlan", "predictedOutcome"],
}


def _fmt_number(value: float) -> str:
    """Render whole numbers without a trailing .0."""
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:g}"


def build_student_prompt(student: Student) -> str:
    """Build the analysis prompt from one student's record."""
    assessment_lines = "\n".join(
        f"- {a.name} ({a.type}): {_fmt_number(a.score)}/{_fmt_number(a.max_score)} (Topic: {a.topic})"
        for a in student.assessments
    ) or "- No assessments recorded"
    engagement = student.engagement

    return textwrap.dedent(f"""\
        Analyze the following student data for an EdTech dashboard.
        Student Name: {student.name}
        Current Risk Tier: {student.risk_tier.value} (Score: {_fmt_number(student.risk_score)})
        Attendance: {_fmt_number(student.attendance_rate)}%
        Overall Grade: {_fmt_number(student.overall_grade)}%

        Assessments:
        {{assessments}}

        Engagement:
        - LMS Logins/Week: {_fmt_number(engagement.lms_login_frequency)}
        - Video Watch %: {_fmt_number(engagement.video_watch_percentage)}
        - Missing Assignments: {engagement.missing_assignments}

        Task:
        1. Identify specific risk drivers (e.g., declining quiz scores, low attendance).
        2. Diagnose weak topics based on assessment data.
        3. Create a personalized intervention plan with specific resources (videos, exercises, meetings).
        4. Predict the outcome if no intervention occurs.
        """).replace("{assessments}", assessment_lines)


def summarize_cohort(students: List[Student]) -> Dict[str, Union[int, str]]:
    """Headline numbers for the cohort summary prompt."""
    if not students:
        raise ValueError("Cannot summarize an empty cohort")
    avg_grade = sum(s.overall_grade for s in students) / len(students)
    return {
        'count': len(students),
        'avg_grade': f"{avg_grade:.1f}",
        'at_risk_count': sum(1 for s in students if is_at_risk(s.risk_tier)),
    }


def build_cohort_prompt(summary: Dict[str, Union[int, str]]) -> str:
    """Executive-summary prompt for the whole cohort."""
    return textwrap.dedent(f"""\
        Given a cohort of {summary['count']} students with an average grade of {summary['avg_grade']}% and {summary['at_risk_count']} students flagged as high risk.
        Generate a concise, 2-sentence executive summary for the University Dean regarding the health of this cohort.
        Focus on urgency and general sentiment.
        """)
