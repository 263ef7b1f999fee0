"""Serialize a workout and its per-set progress to canonical notation text.

Rows are formed by value equality of consecutive sets, not by
volume_row_id, and each row line carries one '+' per completed set in that
row. Which sets within a row were completed is not encoded: "3x10 +" reads
back as the first set done, whichever set was actually ticked. Set counts,
row values and per-row completed totals survive a parse round trip.

Other known losses:

- Durations are written in whole minutes. A positive duration under half a
  minute is written as "1min" and reads back as 60 seconds.
- Instruction lines are written verbatim. The notation has no escape, so an
  instruction that itself reads as a header ("- keep elbows tucked") or a
  volume line ("5km") is parsed back as one.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from workout_notation.models import Exercise, ExerciseSet, Progress, Workout
from workout_notation.utils import format_number

logger = logging.getLogger(__name__)

SINGLE_LINE_PER_SET = ("distance", "duration")


def _row_key(exercise_set: ExerciseSet) -> Tuple:
    volume_type = exercise_set.volume_type
    if volume_type == "sets-reps-weight":
        return (volume_type, exercise_set.reps, exercise_set.weight or 0, exercise_set.weight_unit or "kg")
    if volume_type == "duration":
        return (volume_type, _duration_minutes(exercise_set))
    if volume_type == "distance":
        return (volume_type, exercise_set.distance_value() or 0, exercise_set.distance_unit_value() or "km")
    return (volume_type, exercise_set.reps)


def _duration_minutes(exercise_set: ExerciseSet) -> int:
    # The notation has whole minutes only; a positive duration never rounds to 0
    seconds = exercise_set.duration or 0
    if seconds <= 0:
        return 0
    return max(1, int(round(seconds / 60)))


def format_duration(total_minutes: int) -> str:
    """90 -> '1h30min', 60 -> '1h', 45 -> '45min'.

    Minutes are written as 'min' because a bare 'm' reads back as metres.
    """
    hours, minutes = divmod(max(0, total_minutes), 60)
    if hours and minutes:
        return f"{hours}h{minutes}min"
    if hours:
        return f"{hours}h"
    return f"{minutes}min"


def format_volume(exercise_set: ExerciseSet, total_sets: int) -> str:
    """Volume part of a row line, without completion markers."""
    volume_type = exercise_set.volume_type
    if volume_type == "sets-reps-weight":
        weight = format_number(exercise_set.weight or 0)
        return f"{total_sets}x{exercise_set.reps}x{weight}{exercise_set.weight_unit or 'kg'}"
    if volume_type == "duration":
        return format_duration(_duration_minutes(exercise_set))
    if volume_type == "distance":
        distance = format_number(exercise_set.distance_value() or 0)
        return f"{distance}{exercise_set.distance_unit_value() or 'km'}"
    return f"{total_sets}x{exercise_set.reps}"


def _with_markers(volume: str, done: int) -> str:
    return f"{volume} {'+' * done}" if done > 0 else volume


def group_rows(sets: Sequence[ExerciseSet]) -> List[List[int]]:
    """Indices of consecutive sets with equal type and shared values.

    Completion sets are skipped.
    """
    rows: List[List[int]] = []
    last_key: Optional[Tuple] = None
    for index, exercise_set in enumerate(sets):
        if exercise_set.volume_type == "completion":
            last_key = None
            continue
        key = _row_key(exercise_set)
        if rows and key == last_key:
            rows[-1].append(index)
        else:
            rows.append([index])
        last_key = key
    return rows


def _exercise_lines(exercise: Exercise, flags: List[bool], include_ids: bool) -> List[str]:
    def done_at(i: int) -> bool:
        return i < len(flags) and bool(flags[i])

    completion_only = bool(exercise.sets) and all(s.volume_type == "completion" for s in exercise.sets)

    header = f"- {exercise.name.strip() or 'Exercise'}"
    if completion_only and any(done_at(i) for i in range(len(exercise.sets))):
        header += " +"
    if include_ids:
        header += f" #id:{exercise.id}"
    lines = [header]

    for instruction in (exercise.instructions or "").split("\n"):
        if instruction.strip():
            lines.append(instruction.strip())

    for indices in group_rows(exercise.sets):
        first = exercise.sets[indices[0]]
        if first.volume_type in SINGLE_LINE_PER_SET:
            for i in indices:
                lines.append(_with_markers(format_volume(exercise.sets[i], 1), 1 if done_at(i) else 0))
        else:
            done = sum(1 for i in indices if done_at(i))
            lines.append(_with_markers(format_volume(first, len(indices)), done))

    return lines


def generate_workout_text(
    workout: Workout,
    progress: Optional[Progress] = None,
    include_ids: bool = False,
) -> str:
    """
    Render a workout as notation text.

    Args:
        workout: Workout whose exercises are rendered in order
        progress: Per-exercise completion flags, parallel to each set list
        include_ids: Append a '#id:<exercise-id>' token to each header so
            exercise identity survives reordering blocks in the text

    Returns:
        Canonical notation text (exercises separated by a blank line)
    """
    progress = progress or {}
    blocks = []
    for exercise in workout.exercises:
        flags = progress.get(exercise.id, [])
        blocks.append("\n".join(_exercise_lines(exercise, flags, include_ids)))

    text = "\n\n".join(blocks).strip()
    logger.debug(f"Generated notation for {len(workout.exercises)} exercises ({len(text)} chars)")
    return text
