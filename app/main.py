"""FastAPI main application for the EdPulse dashboard."""

import os
import csv
import logging
import threading
import traceback
import uuid
from io import StringIO
from typing import Dict, List, Optional

from fastapi import FastAPI, BackgroundTasks, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import (
    configure_logging,
    get_allow_origins,
    get_mock_seed,
    get_mock_student_count,
    is_debug,
)
from app.models import AIStudentAnalysis, DashboardResponse, GenerateResponse, Student
from app.mock_data import generate_mock_data
from app.risk import compute_cohort_stats, filter_students, risk_distribution_chart, sort_by_risk
from app.gemini_service import AIServiceError, analyze_student_risk, generate_cohort_insights

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="EdPulse AI Dashboard", version="1.0.0")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ANALYSIS_ERROR_MESSAGE = "Failed to generate AI insights. Please check API key."
INSIGHTS_PLACEHOLDER = "Analyzing cohort patterns..."
TOP_AT_RISK = 10


# Override default exception handlers to return JSON (register specific handlers first)
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler_json(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions and return JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler_json(request: Request, exc: RequestValidationError):
    """Handle validation errors and return JSON."""
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )


# Only catches exceptions not handled by the specific handlers above
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions and return JSON."""
    logger.exception("Unhandled error on %s", request.url.path)
    error_detail = str(exc)
    if is_debug():
        error_detail = f"{str(exc)}\n\n{traceback.format_exc()}"

    return JSONResponse(
        status_code=500,
        content={
            "detail": f"Internal server error: {error_detail}",
            "type": type(exc).__name__
        }
    )


# In-memory dashboard state; replaced wholesale when a new dataset is loaded
# Every read-modify-write of dashboard_state happens under state_lock
state_lock = threading.Lock()
dashboard_state: Dict[str, object] = {
    'session_id': None,
    'students': [],
    'insights': None,
}


def reset_state() -> None:
    """Drop the loaded cohort and its insights."""
    with state_lock:
        dashboard_state['session_id'] = None
        dashboard_state['students'] = []
        dashboard_state['insights'] = None


def replace_dataset(students: List[Student]) -> str:
    """Install a new cohort under a fresh session id and return the id."""
    session_id = uuid.uuid4().hex
    with state_lock:
        dashboard_state['session_id'] = session_id
        dashboard_state['students'] = students
        dashboard_state['insights'] = None
    return session_id


def get_students() -> List[Student]:
    return dashboard_state['students']  # type: ignore[return-value]


def find_student(student_id: str) -> Student:
    """Look up a loaded student or raise 404."""
    for student in get_students():
        if student.id == student_id:
            return student
    raise HTTPException(status_code=404, detail=f"Student {student_id} not found")


def update_student_analysis(
    student_id: str,
    analysis: AIStudentAnalysis,
    session_id: Optional[str] = None,
) -> Optional[Student]:
    """
    Attach an analysis by replacing the student record.

    When session_id is given and a different dataset has been loaded since,
    the analysis is dropped and None is returned.
    """
    with state_lock:
        if session_id is not None and dashboard_state['session_id'] != session_id:
            logger.info("Dropping analysis for %s from replaced session %s", student_id, session_id)
            return None

        students = get_students()
        current = next((s for s in students if s.id == student_id), None)
        if current is None:
            return None

        updated = current.model_copy(update={'ai_analysis': analysis})
        dashboard_state['students'] = [
            updated if s.id == student_id else s for s in students
        ]
        return updated


def refresh_cohort_insights(session_id: str, students: List[Student]) -> None:
    """Background task: fetch the cohort summary for the dataset that requested it."""
    try:
        insights = generate_cohort_insights(students)
    except (AIServiceError, ValueError):
        logger.warning("Cohort insights unavailable for session %s", session_id)
        return

    # A newer dataset may have been loaded while the request was in flight
    with state_lock:
        if dashboard_state['session_id'] == session_id:
            dashboard_state['insights'] = insights


@app.get("/", response_class=HTMLResponse)
async def root():
    """Serve the main HTML page."""
    html_path = os.path.join(os.path.dirname(__file__), 'static', 'index.html')
    if os.path.exists(html_path):
        with open(html_path, 'r', encoding='utf-8') as f:
            return HTMLResponse(content=f.read())
    return HTMLResponse(content="<h1>EdPulse AI</h1><p>Static files not found. Use the JSON API under /dashboard and /students.</p>")


@app.get("/health")
async def health_check():
    """Health check endpoint to test server connectivity."""
    return JSONResponse(content={"status": "ok", "message": "Server is running"})


@app.post("/students/generate", response_model=GenerateResponse)
def load_demo_dataset(
    background_tasks: BackgroundTasks,
    count: Optional[int] = Query(None, ge=0, le=1000),
    seed: Optional[int] = None,
):
    """Load a fresh demo cohort and queue the cohort summary."""
    students = generate_mock_data(
        count=get_mock_student_count() if count is None else count,
        seed=get_mock_seed() if seed is None else seed,
    )

    session_id = replace_dataset(students)

    if students:
        background_tasks.add_task(refresh_cohort_insights, session_id, students)

    logger.info("Loaded demo dataset %s with %d students", session_id, len(students))
    return GenerateResponse(
        success=True,
        message=f"Successfully generated {len(students)} students",
        total_students=len(students),
    )


@app.get("/students", response_model=List[Student])
async def list_students(
    q: str = "",
    limit: Optional[int] = Query(None, ge=1),
):
    """Students sorted by risk score, highest first, optionally filtered."""
    students = sort_by_risk(filter_students(get_students(), q))
    if limit is not None:
        students = students[:limit]
    return students


@app.get("/students/{student_id}", response_model=Student)
async def get_student(student_id: str):
    """Get one student's profile."""
    return find_student(student_id)


@app.post("/students/{student_id}/analysis", response_model=AIStudentAnalysis)
def request_student_analysis(student_id: str, refresh: bool = False):
    """Return the student's AI analysis, generating it when missing or on refresh."""
    with state_lock:
        session_id = dashboard_state['session_id']
        student = find_student(student_id)
    if student.ai_analysis is not None and not refresh:
        return student.ai_analysis

    try:
        analysis = analyze_student_risk(student)
    except AIServiceError:
        # Already logged by the service
        raise HTTPException(status_code=502, detail=ANALYSIS_ERROR_MESSAGE)

    update_student_analysis(student_id, analysis, session_id=session_id)
    return analysis


@app.get("/cohort/insights")
async def get_cohort_insights():
    """The cohort executive summary, or a placeholder while it is pending."""
    insights = dashboard_state['insights']
    return {
        'ready': insights is not None,
        'insights': insights or INSIGHTS_PLACEHOLDER,
    }


@app.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard():
    """Cards, chart data and the top at-risk students."""
    students = get_students()
    stats = compute_cohort_stats(students)
    return DashboardResponse(
        stats=stats,
        chart=risk_distribution_chart(stats),
        at_risk_students=sort_by_risk(students)[:TOP_AT_RISK],
        insights=dashboard_state['insights'] or INSIGHTS_PLACEHOLDER,
    )


@app.get("/download.csv")
async def download_csv():
    """Download the loaded cohort as CSV."""
    students = get_students()
    if not students:
        raise HTTPException(status_code=404, detail="No results available")

    # Create CSV
    output = StringIO()
    writer = csv.writer(output)

    writer.writerow([
        'Student ID',
        'Student Name',
        'Email',
        'Cohort',
        'Grade %',
        'Attendance %',
        'Risk Score',
        'Risk Tier',
        'Predicted Outcome'
    ])

    for student in sort_by_risk(students):
        writer.writerow([
            student.id,
            student.name,
            student.email,
            student.cohort,
            f"{student.overall_grade:.2f}",
            f"{student.attendance_rate:.2f}",
            f"{student.risk_score:.2f}",
            student.risk_tier.value,
            student.ai_analysis.predicted_outcome if student.ai_analysis else ''
        ])

    output.seek(0)
    session_id = str(dashboard_state['session_id'] or '')

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename=student_risk_report_{session_id[:10]}.csv"
        }
    )


# Mount static files
static_path = os.path.join(os.path.dirname(__file__), 'static')
if os.path.exists(static_path):
    app.mount("/static", StaticFiles(directory=static_path), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
