"""Workout execution state: a workout plus per-set completion flags.

progress[exercise_id] is parallel to that exercise's set list. Every
structural edit goes through reconcile_progress so the two stay aligned.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from workout_notation.models import (
    Exercise,
    Progress,
    VolumeRowUpdate,
    Workout,
    WorkoutExecutionState,
)
from workout_notation.services import volume_rows
from workout_notation.services.input_cache import EditKey, LocalEditCache

logger = logging.getLogger(__name__)


def reconcile_progress(workout: Workout, progress: Optional[Progress]) -> Progress:
    """Truncate or pad each exercise's flags to its set count.

    Values at indices that still exist are preserved; exercises no longer
    in the workout are dropped.
    """
    progress = progress or {}
    aligned: Dict[str, List[bool]] = {}
    for exercise in workout.exercises:
        existing = progress.get(exercise.id, [])
        size = len(exercise.sets)
        flags = [bool(v) for v in existing[:size]]
        flags.extend([False] * (size - len(flags)))
        aligned[exercise.id] = flags
    return aligned


@dataclass
class ExerciseProgressSummary:
    """Completion summary for one exercise."""
    completed_sets: List[bool]
    completed_count: int
    total_count: int
    is_completed: bool
    percentage: float


class WorkoutExecution:
    """Owns the single in-memory execution state of an editing session."""

    def __init__(
        self,
        workout: Workout,
        progress: Optional[Progress] = None,
        on_workout_update: Optional[Callable[[Workout], None]] = None,
    ):
        self._state = WorkoutExecutionState(
            workout=workout,
            progress=reconcile_progress(workout, progress),
        )
        self.on_workout_update = on_workout_update
        self.edits = LocalEditCache()

    @property
    def state(self) -> WorkoutExecutionState:
        return self._state

    @property
    def workout(self) -> Workout:
        return self._state.workout

    @property
    def progress(self) -> Progress:
        return self._state.progress

    def _notify(self) -> None:
        if self.on_workout_update is not None:
            self.on_workout_update(self._state.workout)

    def replace_state(self, workout: Workout, progress: Progress) -> None:
        """Replace workout and progress together (e.g. after parsing text).

        Pending field edits point at rows of the old workout and are dropped.
        """
        self.edits.clear()
        self._state = WorkoutExecutionState(
            workout=workout,
            progress=reconcile_progress(workout, progress),
        )
        self._notify()

    def update_workout_structure(self, workout: Workout) -> None:
        """Adopt a structurally edited workout, keeping progress by position."""
        self._state = WorkoutExecutionState(
            workout=workout,
            progress=reconcile_progress(workout, self._state.progress),
        )
        self._notify()

    def set_completion(self, exercise_id: str, set_index: int, completed: bool) -> None:
        flags = self._state.progress.get(exercise_id)
        if flags is None or not 0 <= set_index < len(flags):
            logger.debug(f"Ignoring completion for {exercise_id}[{set_index}]")
            return
        updated = list(flags)
        updated[set_index] = completed
        self._state.progress = {**self._state.progress, exercise_id: updated}

    def toggle_set_completion(self, exercise_id: str, set_index: int) -> None:
        flags = self._state.progress.get(exercise_id, [])
        current = flags[set_index] if 0 <= set_index < len(flags) else False
        self.set_completion(exercise_id, set_index, not current)

    def toggle_exercise_completion(self, exercise_id: str) -> None:
        """Mark every set done, or clear them all if they already are."""
        exercise = self.workout.find_exercise(exercise_id)
        if exercise is None:
            return
        flags = self._state.progress.get(exercise_id, [])
        all_done = len(flags) == len(exercise.sets) and all(flags)
        self._state.progress = {
            **self._state.progress,
            exercise_id: [not all_done] * len(exercise.sets),
        }

    def exercise_progress(self, exercise_id: str) -> ExerciseProgressSummary:
        flags = self._state.progress.get(exercise_id, [])
        completed = sum(1 for f in flags if f)
        total = len(flags)
        return ExerciseProgressSummary(
            completed_sets=list(flags),
            completed_count=completed,
            total_count=total,
            is_completed=total > 0 and completed == total,
            percentage=(completed / total) * 100 if total else 0.0,
        )

    def overall_progress(self) -> Dict[str, float]:
        flags = [f for values in self._state.progress.values() for f in values]
        completed = sum(1 for f in flags if f)
        total = len(flags)
        return {
            "completed_count": completed,
            "total_count": total,
            "percentage": (completed / total) * 100 if total else 0.0,
        }

    # Volume row edits

    def _apply_to_exercise(self, exercise_id: str, edit: Callable[[Exercise], Exercise]) -> bool:
        exercises = list(self.workout.exercises)
        for index, exercise in enumerate(exercises):
            if exercise.id != exercise_id:
                continue
            edited = edit(exercise)
            if edited is exercise:
                return False
            exercises[index] = edited
            self.update_workout_structure(self.workout.model_copy(update={"exercises": exercises}))
            return True
        logger.debug(f"No exercise {exercise_id} in workout {self.workout.id}")
        return False

    def update_volume_row(
        self,
        exercise_id: str,
        row_index: int,
        updates: Union[Mapping[str, Any], VolumeRowUpdate],
    ) -> bool:
        return self._apply_to_exercise(
            exercise_id, lambda ex: volume_rows.update_volume_row(ex, row_index, updates)
        )

    def add_volume_row(self, exercise_id: str) -> bool:
        return self._apply_to_exercise(exercise_id, volume_rows.add_volume_row)

    def remove_volume_row(self, exercise_id: str, row_index: int) -> bool:
        return self._apply_to_exercise(
            exercise_id, lambda ex: volume_rows.remove_volume_row(ex, row_index)
        )

    def normalize_volume_rows(self, exercise_id: str) -> bool:
        return self._apply_to_exercise(exercise_id, volume_rows.normalize_exercise_volume_rows)

    # Uncommitted row field edits

    def _row_key(self, exercise_id: str, row_index: int, field: str) -> EditKey:
        return EditKey(exercise_id, row_index, field, scope="row")

    def _row_value(self, exercise_id: str, row_index: int, field: str) -> Optional[float]:
        exercise = self.workout.find_exercise(exercise_id)
        if exercise is None:
            return None
        rows = volume_rows.get_volume_rows(exercise)
        if not 0 <= row_index < len(rows):
            return None
        return getattr(rows[row_index], field, None)

    def _forward_row_edit(self, key: EditKey, value: float) -> None:
        self.update_volume_row(key.exercise_id, key.index, {key.field: value})

    def row_field_display(self, exercise_id: str, row_index: int, field: str) -> str:
        """Text for a row field: the pending edit if any, else the row's value."""
        key = self._row_key(exercise_id, row_index, field)
        return self.edits.display_value(key, self._row_value(exercise_id, row_index, field))

    def edit_row_field(self, exercise_id: str, row_index: int, field: str, raw: str) -> None:
        """Record a keystroke; positive numbers are applied to the row right away."""
        self.edits.edit(self._row_key(exercise_id, row_index, field), raw, self._forward_row_edit)

    def commit_row_field(
        self,
        exercise_id: str,
        row_index: int,
        field: str,
        default: Optional[float] = None,
    ) -> float:
        """
        Settle a row field on blur.

        Invalid input reverts to default (the row's current value when not
        given, or 1) and that value is applied to the row.
        """
        if default is None:
            current = self._row_value(exercise_id, row_index, field)
            default = current if current is not None and current > 0 else 1
        return self.edits.commit(
            self._row_key(exercise_id, row_index, field), default, self._forward_row_edit
        )
