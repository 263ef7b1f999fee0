"""
Notation and volume row endpoints

POST /notation/parse turns notation text into a workout plus per-set
progress; POST /notation/generate goes the other way. The /volume-rows
endpoints run structured-editor edits against a posted workout and return
the edited workout with progress realigned to the new set lists.

Everything is stateless: the client posts the current snapshot each time.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from workout_notation.config import settings
from workout_notation.models import Progress, Workout
from workout_notation.parsers.text_parser import WorkoutTextParser
from workout_notation.services import volume_rows
from workout_notation.services.execution_state import WorkoutExecution
from workout_notation.services.text_serializer import generate_workout_text

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_TEXT_LENGTH = 50000

# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------


class ParseNotationRequest(BaseModel):
    """Request model for POST /notation/parse"""
    text: str = Field(..., max_length=MAX_TEXT_LENGTH, description="Workout notation text")
    workout: Optional[Workout] = Field(default=None, description="Current workout; keeps exercise ids and metadata")
    complete_all: bool = Field(default=False, description="Mark every parsed set as completed")


class GenerateNotationRequest(BaseModel):
    """Request model for POST /notation/generate"""
    workout: Workout
    progress: Progress = Field(default_factory=dict)
    include_ids: Optional[bool] = Field(default=None, description="Append '#id:' tokens to headers")


class ExerciseRequest(BaseModel):
    """A workout snapshot plus the exercise an edit applies to"""
    workout: Workout
    progress: Progress = Field(default_factory=dict)
    exercise_id: str


class RowRequest(ExerciseRequest):
    row_index: int


class UpdateRowRequest(RowRequest):
    updates: Dict[str, Any] = Field(default_factory=dict, description="Partial row fields; sanitized server-side")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _execution_for(request: ExerciseRequest) -> WorkoutExecution:
    if request.workout.find_exercise(request.exercise_id) is None:
        raise HTTPException(
            status_code=400,
            detail=f"Exercise '{request.exercise_id}' not found in workout",
        )
    return WorkoutExecution(request.workout, request.progress)


def _edit_response(execution: WorkoutExecution, exercise_id: str, changed: bool) -> Dict[str, Any]:
    exercise = execution.workout.find_exercise(exercise_id)
    return {
        "changed": changed,
        "workout": execution.workout.model_dump(),
        "progress": execution.progress,
        "rows": [row.model_dump() for row in volume_rows.get_volume_rows(exercise)],
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health")
def health():
    """Health check endpoint."""
    return {"ok": True}


@router.post("/notation/parse")
def parse_notation(request: ParseNotationRequest):
    """Parse notation text into a workout and per-set progress."""
    parser = WorkoutTextParser()
    state = parser.parse_to_state(
        request.text,
        existing_workout=request.workout,
        complete_all=request.complete_all,
    )
    logger.info(
        f"Parsed {len(state.workout.exercises)} exercises "
        f"({len(parser.warnings)} warnings) from {len(request.text)} chars"
    )
    return {
        "workout": state.workout.model_dump(),
        "progress": state.progress,
        "warnings": parser.warnings,
    }


@router.post("/notation/generate")
def generate_notation(request: GenerateNotationRequest):
    """Render a workout and its progress as notation text."""
    include_ids = settings.EMBED_EXERCISE_IDS if request.include_ids is None else request.include_ids
    text = generate_workout_text(request.workout, request.progress, include_ids=include_ids)
    return {"text": text}


@router.post("/volume-rows")
def list_volume_rows(request: ExerciseRequest):
    """Collapsed volume rows of one exercise."""
    execution = _execution_for(request)
    exercise = execution.workout.find_exercise(request.exercise_id)
    rows: List[Dict[str, Any]] = [row.model_dump() for row in volume_rows.get_volume_rows(exercise)]
    return {"rows": rows}


@router.post("/volume-rows/update")
def update_volume_row(request: UpdateRowRequest):
    """Apply a partial edit to one volume row."""
    execution = _execution_for(request)
    changed = execution.update_volume_row(request.exercise_id, request.row_index, request.updates)
    return _edit_response(execution, request.exercise_id, changed)


@router.post("/volume-rows/add")
def add_volume_row(request: ExerciseRequest):
    """Append a default 3x10 volume row."""
    execution = _execution_for(request)
    changed = execution.add_volume_row(request.exercise_id)
    return _edit_response(execution, request.exercise_id, changed)


@router.post("/volume-rows/remove")
def remove_volume_row(request: RowRequest):
    """Delete every set of one volume row."""
    execution = _execution_for(request)
    changed = execution.remove_volume_row(request.exercise_id, request.row_index)
    return _edit_response(execution, request.exercise_id, changed)


@router.post("/volume-rows/normalize")
def normalize_volume_rows(request: ExerciseRequest):
    """Repair volume_row_id assignments of one exercise."""
    execution = _execution_for(request)
    changed = execution.normalize_volume_rows(request.exercise_id)
    return _edit_response(execution, request.exercise_id, changed)
