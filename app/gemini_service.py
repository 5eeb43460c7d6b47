"""Gemini calls: per-student risk analysis and cohort executive summary."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import google.generativeai as genai
from pydantic import ValidationError

from app.config import get_api_key, get_model_name
from app.models import AIStudentAnalysis, Student
from app.prompts import (
    ANALYSIS_SCHEMA,
    SYSTEM_INSTRUCTION,
    build_cohort_prompt,
    build_student_prompt,
    summarize_cohort,
)

logger = logging.getLogger(__name__)

COHORT_FALLBACK_TEXT = "Unable to generate cohort insights."


class AIServiceError(Exception):
    """Any failure of a generative-AI request or of parsing its response."""


def get_client(system_instruction: Optional[str] = None) -> Any:
    """
    Build a Gemini model client from the environment.

    Raises:
        AIServiceError: If no API key is configured
    """
    api_key = get_api_key()
    if not api_key:
        raise AIServiceError("Gemini API key is not configured")
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(get_model_name(), system_instruction=system_instruction)


def _response_text(response: Any) -> str:
    # .text raises ValueError when the response has no usable parts
    try:
        return (response.text or "").strip()
    except ValueError:
        return ""


def analyze_student_risk(student: Student, client: Optional[Any] = None) -> AIStudentAnalysis:
    """
    Ask the model for a structured risk analysis of one student.

    Args:
        student: Student to analyze
        client: Object exposing ``generate_content``; built from config if omitted

    Returns:
        Validated analysis stamped with the local generation time

    Raises:
        AIServiceError: On network failure, empty output or a response that
            does not match the analysis schema
    """
    prompt = build_student_prompt(student)
    try:
        model = client or get_client(system_instruction=SYSTEM_INSTRUCTION)
        response = model.generate_content(
            prompt,
            generation_config={
                "response_mime_type": "application/json",
                "response_schema": ANALYSIS_SCHEMA,
            },
        )
        text = _response_text(response)
        if not text:
            raise AIServiceError("No response from AI")

        data = json.loads(text)
        if not isinstance(data, dict):
            raise AIServiceError("AI response is not a JSON object")
        return AIStudentAnalysis.model_validate(
            {**data, "generatedAt": datetime.now(timezone.utc).isoformat()}
        )
    except AIServiceError:
        logger.exception("Error analyzing student %s", student.id)
        raise
    except (json.JSONDecodeError, ValidationError) as e:
        logger.exception("Error analyzing student %s: malformed AI response", student.id)
        raise AIServiceError(f"Malformed AI response: {e}") from e
    except Exception as e:
        logger.exception("Error analyzing student %s", student.id)
        raise AIServiceError(str(e)) from e


def generate_cohort_insights(students: List[Student], client: Optional[Any] = None) -> str:
    """
    Two-sentence executive summary of the cohort for the Dean.

    Raises:
        ValueError: If the cohort is empty
        AIServiceError: If the request itself fails
    """
    summary = summarize_cohort(students)
    prompt = build_cohort_prompt(summary)
    try:
        model = client or get_client()
        response = model.generate_content(prompt)
    except AIServiceError:
        logger.exception("Error generating cohort insights")
        raise
    except Exception as e:
        logger.exception("Error generating cohort insights")
        raise AIServiceError(str(e)) from e

    return _response_text(response) or COHORT_FALLBACK_TEXT
