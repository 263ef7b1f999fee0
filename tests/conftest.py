"""
Test fixtures for workout-notation.

Provides a FastAPI TestClient and small sample workouts shared across the
parser, serializer, volume row and sync session tests.
"""

import sys
from pathlib import Path
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import workout_notation...`
for p in {ROOT, SRC}:
    p_str = str(p)
    if p_str not in sys.path:
        sys.path.insert(0, p_str)

from workout_notation.main import app
from workout_notation.models import Exercise, ExerciseSet, Workout


# ---------------------------------------------------------------------------
# Core Test Client
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> TestClient:
    """Per-test FastAPI TestClient."""
    return TestClient(app)


# ---------------------------------------------------------------------------
# Sample Data Fixtures
# ---------------------------------------------------------------------------


def make_sets(count: int, **fields) -> list:
    """`count` identical sets sharing whatever volume_row_id is passed in."""
    return [ExerciseSet(**fields) for _ in range(count)]


@pytest.fixture
def bench_press() -> Exercise:
    """3 x 10 x 60kg in one volume row."""
    return Exercise(
        id="ex-bench",
        name="Bench Press",
        category="Strength",
        muscle_groups=["chest"],
        sets=make_sets(
            3,
            volume_type="sets-reps-weight",
            reps=10,
            weight=60,
            weight_unit="kg",
            volume_row_id="row-bench",
        ),
    )


@pytest.fixture
def run() -> Exercise:
    """A single 5km distance set."""
    return Exercise(
        id="ex-run",
        name="Run",
        category="Cardio",
        sets=[
            ExerciseSet(
                volume_type="distance",
                distance=5,
                distance_unit="km",
                notes="5km",
                volume_row_id="row-run",
            )
        ],
    )


@pytest.fixture
def plank() -> Exercise:
    """Exercise with no volume, tracked by a single completion set."""
    return Exercise(
        id="ex-plank",
        name="Plank",
        sets=[ExerciseSet(volume_type="completion", rest_time=0, volume_row_id="completion-plank")],
    )


@pytest.fixture
def sample_workout(bench_press, run, plank) -> Workout:
    """Bench, run and plank, in that order."""
    return Workout(id="workout-1", name="Monday", exercises=[bench_press, run, plank])


@pytest.fixture
def sample_progress() -> Dict[str, list]:
    return {
        "ex-bench": [True, False, True],
        "ex-run": [True],
        "ex-plank": [True],
    }


@pytest.fixture
def sample_workout_dict(sample_workout) -> Dict[str, Any]:
    """sample_workout as the JSON a client would post."""
    return sample_workout.model_dump()


@pytest.fixture
def sample_text() -> str:
    """Canonical notation for a small workout."""
    return (
        "- Bench Press\n"
        "Keep elbows tucked\n"
        "5x10x60kg +++\n"
        "\n"
        "- Run\n"
        "5km +\n"
        "\n"
        "- Plank +"
    )
