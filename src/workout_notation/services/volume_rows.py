"""Volume row grouping and structural edits.

A volume row is the collapsed, editable view of the sets of one exercise
that share a volume_row_id. Rows are derived on demand from the flat set
list; every edit returns a new Exercise and never mutates its input.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from workout_notation.config import settings
from workout_notation.models import (
    MULTI_SET_TYPES,
    SINGLE_SET_TYPES,
    Exercise,
    ExerciseSet,
    VolumeRow,
    VolumeRowUpdate,
)
from workout_notation.services.workout_sanitizer import sanitize_volume_row_updates
from workout_notation.utils import format_number, new_volume_row_id

logger = logging.getLogger(__name__)

DEFAULT_ROW_SETS = 3
DEFAULT_REPS = 10
DEFAULT_DURATION_MINUTES = 15
DEFAULT_DISTANCE = 10

Updates = Union[Mapping[str, Any], VolumeRowUpdate]


def _row_key(exercise_set: ExerciseSet, index: int) -> str:
    return exercise_set.volume_row_id or f"legacy-{index}"


def get_volume_rows(exercise: Exercise) -> List[VolumeRow]:
    """Group sets strictly by volume_row_id, ordered by first set index.

    Sets without an id are singleton rows keyed 'legacy-<index>'.
    Completion sets are not shown as rows.
    """
    groups: Dict[str, List[int]] = {}
    for index, exercise_set in enumerate(exercise.sets):
        if exercise_set.volume_type == 'completion':
            continue
        groups.setdefault(_row_key(exercise_set, index), []).append(index)

    rows = []
    for key, indices in sorted(groups.items(), key=lambda item: min(item[1])):
        first = exercise.sets[indices[0]]
        row = VolumeRow(
            type=first.volume_type,
            total_sets=len(indices),
            reps=first.reps,
            set_indices=indices,
            volume_row_id=key,
        )
        if first.volume_type == 'sets-reps-weight':
            row.weight = first.weight
            row.weight_unit = first.weight_unit
        elif first.volume_type == 'duration':
            row.duration = (first.duration or 0) / 60
        elif first.volume_type == 'distance':
            row.distance = first.distance_value() or 0
            row.distance_unit = first.distance_unit_value()
        rows.append(row)

    return rows


def _build_set(row: VolumeRow, base: ExerciseSet, volume_row_id: str) -> ExerciseSet:
    """Fresh set carrying only the fields relevant to row.type."""
    new_set = ExerciseSet(
        volume_type=row.type,
        reps=row.reps,
        rest_time=base.rest_time,
        completed=base.completed,
        volume_row_id=volume_row_id,
    )

    if row.type == 'sets-reps-weight':
        new_set.weight = row.weight or 0
        new_set.weight_unit = row.weight_unit or 'kg'
    elif row.type == 'duration':
        new_set.duration = (row.duration or DEFAULT_DURATION_MINUTES) * 60
        new_set.reps = 1
    elif row.type == 'distance':
        distance = row.distance or DEFAULT_DISTANCE
        unit = row.distance_unit or 'km'
        new_set.distance = distance
        new_set.distance_unit = unit
        new_set.notes = f"{format_number(distance)}{unit}"
        new_set.reps = 1

    return new_set


def _has_changes(row: VolumeRow, clean: Dict[str, Any]) -> bool:
    return any(getattr(row, field) != value for field, value in clean.items())


def _replace_row(
    sets: List[ExerciseSet],
    indices: List[int],
    replacement: List[ExerciseSet],
) -> List[ExerciseSet]:
    """Drop the row's sets and insert replacement at the row's first position."""
    drop = set(indices)
    insert_at = min(indices)
    kept = [s for i, s in enumerate(sets) if i not in drop]
    return kept[:insert_at] + replacement + kept[insert_at:]


def update_volume_row(exercise: Exercise, row_index: int, updates: Updates) -> Exercise:
    """
    Apply an edit to one volume row.

    Branches, in priority order:
    a. type change to duration/distance: collapse the row to one set
    b. type change from duration/distance to sets-reps[-weight]: expand to
       3 sets sharing one volume_row_id
    c. total_sets change: append copies of the row's first set, or drop
       sets from the end of the row
    d. anything else: rewrite every set in the row with the shared values
       and one common volume_row_id

    Args:
        exercise: Exercise to edit (not mutated)
        row_index: Position in get_volume_rows(exercise)
        updates: Partial row fields; sanitized before use

    Returns:
        Updated exercise, or the same exercise when the row index is invalid
        or nothing would change
    """
    rows = get_volume_rows(exercise)
    if row_index < 0 or row_index >= len(rows):
        logger.debug(f"Ignoring update for missing volume row {row_index} on {exercise.id}")
        return exercise

    row = rows[row_index]
    clean = sanitize_volume_row_updates(updates)
    if not _has_changes(row, clean):
        return exercise

    updated = row.model_copy(update=clean)
    sets = list(exercise.sets)
    template = sets[row.set_indices[0]]
    row_id = template.volume_row_id or new_volume_row_id()
    type_changed = updated.type != row.type

    if type_changed and updated.type in SINGLE_SET_TYPES:
        updated.total_sets = 1
        new_sets = _replace_row(sets, row.set_indices, [_build_set(updated, template, row_id)])

    elif type_changed and updated.type in MULTI_SET_TYPES and row.type in SINGLE_SET_TYPES:
        updated.total_sets = DEFAULT_ROW_SETS
        updated.reps = clean.get("reps", DEFAULT_REPS)
        expanded = [
            _build_set(updated, template, row_id).model_copy(update={"completed": False})
            for _ in range(DEFAULT_ROW_SETS)
        ]
        new_sets = _replace_row(sets, row.set_indices, expanded)

    elif "total_sets" in clean and clean["total_sets"] != row.total_sets:
        fields_changed = _has_changes(row, {k: v for k, v in clean.items() if k != "total_sets"})
        difference = clean["total_sets"] - row.total_sets

        if difference > 0:
            kept_indices = list(row.set_indices)
        else:
            kept_indices = row.set_indices[:clean["total_sets"]]

        kept: Dict[int, ExerciseSet] = {}
        for i in kept_indices:
            if fields_changed:
                kept[i] = _build_set(updated, sets[i], row_id)
            else:
                kept[i] = sets[i].model_copy(update={"volume_row_id": row_id})

        clones = []
        if difference > 0:
            clone_base = kept[kept_indices[0]]
            clones = [clone_base.model_copy(update={"completed": False}) for _ in range(difference)]

        # Kept sets stay in place, dropped ones come off the end of the row
        # and new ones go right after its last set
        row_positions = set(row.set_indices)
        last = max(row.set_indices)
        new_sets = []
        for i, s in enumerate(sets):
            if i in row_positions:
                if i in kept:
                    new_sets.append(kept[i])
            else:
                new_sets.append(s)
            if i == last:
                new_sets.extend(clones)

    else:
        row_positions = set(row.set_indices)
        new_sets = [
            _build_set(updated, s, row_id) if i in row_positions else s
            for i, s in enumerate(sets)
        ]

    return exercise.model_copy(update={"sets": new_sets})


def add_volume_row(exercise: Exercise) -> Exercise:
    """Append a default row: 3 sets of 10 reps sharing a fresh id."""
    volume_row_id = new_volume_row_id()
    new_sets = [
        ExerciseSet(
            volume_type='sets-reps',
            reps=DEFAULT_REPS,
            rest_time=settings.DEFAULT_REST_TIME,
            volume_row_id=volume_row_id,
        )
        for _ in range(DEFAULT_ROW_SETS)
    ]
    return exercise.model_copy(update={"sets": list(exercise.sets) + new_sets})


def remove_volume_row(exercise: Exercise, row_index: int) -> Exercise:
    """Delete every set of the row; invalid indices are a no-op."""
    rows = get_volume_rows(exercise)
    if row_index < 0 or row_index >= len(rows):
        return exercise

    drop = set(rows[row_index].set_indices)
    return exercise.model_copy(
        update={"sets": [s for i, s in enumerate(exercise.sets) if i not in drop]}
    )


def _value_key(exercise_set: ExerciseSet) -> Tuple:
    return (
        exercise_set.volume_type,
        exercise_set.reps,
        exercise_set.weight,
        exercise_set.weight_unit,
        exercise_set.duration,
        exercise_set.distance_value(),
        exercise_set.distance_unit_value(),
    )


def normalize_exercise_volume_rows(exercise: Exercise) -> Exercise:
    """
    Repair volume_row_id assignments without touching set values.

    Sets with identical values share one id; a value-unique set gets an id
    of its own. Existing ids are reused where they are unambiguous, so
    running this twice gives the same result as running it once.
    """
    groups: Dict[Tuple, List[int]] = {}
    for index, exercise_set in enumerate(exercise.sets):
        if exercise_set.volume_type == 'completion':
            continue
        groups.setdefault(_value_key(exercise_set), []).append(index)

    claimed: Set[str] = set()
    assigned: Dict[int, str] = {}
    for indices in sorted(groups.values(), key=min):
        candidate: Optional[str] = None
        counts = Counter(
            exercise.sets[i].volume_row_id for i in indices if exercise.sets[i].volume_row_id
        )
        for existing_id, _ in counts.most_common():
            if existing_id not in claimed:
                candidate = existing_id
                break
        row_id = candidate or new_volume_row_id()
        claimed.add(row_id)
        for i in indices:
            assigned[i] = row_id

    new_sets = []
    changed = 0
    for index, exercise_set in enumerate(exercise.sets):
        row_id = assigned.get(index)
        if row_id is not None and row_id != exercise_set.volume_row_id:
            new_sets.append(exercise_set.model_copy(update={"volume_row_id": row_id}))
            changed += 1
        else:
            new_sets.append(exercise_set)

    if not changed:
        return exercise

    logger.debug(f"Normalized {changed} volume_row_id assignments on {exercise.id}")
    return exercise.model_copy(update={"sets": new_sets})
