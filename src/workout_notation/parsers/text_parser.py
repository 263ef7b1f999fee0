"""
Text Parser

Parses workout notation text into exercises and per-set progress:

    - Bench Press
    Keep elbows tucked
    5x10x60kg +++
    - Run
    5km +
    - Plank +

Header lines start with '-', volume lines follow the sets/distance/time
forms understood by VolumeLineParser, and anything else is a cue attached to
the current exercise. Nothing here raises on malformed input.
"""

import logging
from typing import Dict, List, Optional, Set

from workout_notation.config import settings
from workout_notation.models import Exercise, ExerciseSet, Progress, Workout, WorkoutExecutionState
from workout_notation.services.workout_sanitizer import REPS_RANGE
from workout_notation.utils import clamp, format_number, new_exercise_id, new_volume_row_id
from .base import BaseNotationParser
from .models import ParsedExercise, ParsedVolumeSpec, VolumeLineMatch
from .volume_line_parser import VolumeLineParser

logger = logging.getLogger(__name__)


class WorkoutTextParser(BaseNotationParser):
    """Parser for a whole workout written in notation"""

    def __init__(self, max_parsed_sets: Optional[int] = None):
        super().__init__()
        self.line_parser = VolumeLineParser()
        self.max_parsed_sets = max_parsed_sets or settings.MAX_PARSED_SETS

    def parse_workout_text(self, text: str) -> List[ParsedExercise]:
        """Split text into exercise blocks and parse each block's lines"""
        self.warnings = []
        exercises: List[ParsedExercise] = []
        current: Optional[ParsedExercise] = None
        last_match: Optional[VolumeLineMatch] = None

        for raw_line in (text or "").split('\n'):
            line = raw_line.strip()

            if not line:
                last_match = None
                continue

            header_match = self.HEADER_PATTERN.match(line)
            if header_match:
                if current is not None:
                    exercises.append(self._finish_exercise(current))
                name, done, token_id = self.split_header(header_match.group('header'))
                current = ParsedExercise(name=name, done=done, token_id=token_id)
                last_match = None
                continue

            if current is None:
                logger.debug(f"Ignoring line before first exercise header: {line!r}")
                continue

            match = self.line_parser.parse_line(line)
            if not match.matched:
                current.cues = f"{current.cues}\n{line}" if current.cues else line
                last_match = None
                continue

            if last_match is not None and last_match.shape() == match.shape() and current.specs:
                self._coalesce(current.specs[-1], match)
            else:
                current.specs.append(self._new_spec(match))

            if match.kind == "distance" and match.plus_count > 0:
                current.distance_done = True
            elif match.kind == "time" and match.plus_count > 0:
                current.time_done = True

            last_match = match

        if current is not None:
            exercises.append(self._finish_exercise(current))

        return exercises

    def _planned_for(self, match: VolumeLineMatch) -> int:
        if match.kind != "sets":
            # Distance and time lines are one implicit set each
            return 1

        planned = match.sets_planned or 1
        if planned < 1:
            planned = 1
        if planned > self.max_parsed_sets:
            self.add_warning(
                f"Capped {match.sets_planned} sets to {self.max_parsed_sets} in line {match.raw!r}"
            )
            planned = self.max_parsed_sets
        return planned

    def _reps_for(self, match: VolumeLineMatch) -> int:
        reps = match.reps if match.reps is not None else 1
        low, high = REPS_RANGE
        if not low <= reps <= high:
            self.add_warning(f"Clamped {reps} reps to [{low}, {high}] in line {match.raw!r}")
            reps = int(clamp(reps, low, high))
        return reps

    @staticmethod
    def _line_flags(match: VolumeLineMatch, planned: int) -> List[bool]:
        # Within one line the first plus_count sets are the done ones
        done = min(match.plus_count, planned)
        return [i < done for i in range(planned)]

    def _new_spec(self, match: VolumeLineMatch) -> ParsedVolumeSpec:
        planned = self._planned_for(match)
        completed = self._line_flags(match, planned)
        spec = ParsedVolumeSpec(
            kind=match.kind,
            sets_planned=planned,
            sets_done=sum(completed),
            completed=completed,
            raw=[match.raw],
        )
        if match.kind == "sets":
            spec.reps = self._reps_for(match)
            spec.weight = match.weight
            spec.weight_value = match.weight_value
            spec.weight_unit = match.weight_unit
        elif match.kind == "distance":
            spec.distance = match.value
            spec.distance_unit = match.unit
        elif match.kind == "time":
            spec.duration_seconds = match.duration_seconds
        return spec

    def _coalesce(self, spec: ParsedVolumeSpec, match: VolumeLineMatch) -> None:
        planned = self._planned_for(match)
        completed = self._line_flags(match, planned)
        spec.sets_planned += planned
        spec.sets_done += sum(completed)
        spec.completed.extend(completed)
        spec.raw.append(match.raw)

    def _finish_exercise(self, exercise: ParsedExercise) -> ParsedExercise:
        # A '+' on the header means "all done" when there is volume,
        # otherwise it completes the exercise itself
        if exercise.done and exercise.has_volume:
            exercise.done = False
            exercise.exercise_level_done = True
        return exercise

    def convert_to_exercises(
        self,
        parsed: List[ParsedExercise],
        existing_workout: Optional[Workout] = None,
    ) -> List[Exercise]:
        """
        Build Exercise objects from parsed blocks.

        Identity: a header token ('#id:...') naming an existing exercise keeps
        that exercise's id and metadata. Untokened blocks fall back to the
        existing exercise at the same position, if no token claimed it.
        """
        existing = existing_workout.exercises if existing_workout else []
        existing_by_id = {ex.id: ex for ex in existing}

        claimed: Set[str] = {
            p.token_id for p in parsed if p.token_id and p.token_id in existing_by_id
        }

        exercises: List[Exercise] = []
        used_ids: Set[str] = set()
        for index, parsed_exercise in enumerate(parsed):
            source: Optional[Exercise] = None
            token_id = parsed_exercise.token_id
            if token_id and token_id in existing_by_id and token_id not in used_ids:
                source = existing_by_id[token_id]
            elif not token_id and index < len(existing):
                candidate = existing[index]
                if candidate.id not in claimed:
                    source = candidate
                    claimed.add(candidate.id)

            if source is not None:
                exercise_id = source.id
            elif token_id and token_id not in used_ids and token_id not in existing_by_id:
                exercise_id = token_id
            else:
                exercise_id = new_exercise_id()
            used_ids.add(exercise_id)

            exercise = Exercise(
                id=exercise_id,
                name=parsed_exercise.name,
                category=source.category if source else "General",
                muscle_groups=list(source.muscle_groups) if source else [],
                equipment=list(source.equipment) if source else [],
                instructions=parsed_exercise.cues,
                sets=self._build_sets(parsed_exercise),
            )
            exercises.append(exercise)

        return exercises

    def _build_sets(self, parsed_exercise: ParsedExercise) -> List[ExerciseSet]:
        rest_time = settings.DEFAULT_REST_TIME
        sets: List[ExerciseSet] = []

        for spec in parsed_exercise.specs:
            volume_row_id = new_volume_row_id()
            for _ in range(spec.sets_planned):
                if spec.kind == "sets":
                    sets.append(ExerciseSet(
                        volume_type='sets-reps-weight' if spec.weight_value is not None else 'sets-reps',
                        reps=spec.reps,
                        weight=spec.weight_value,
                        weight_unit=spec.weight_unit,
                        rest_time=rest_time,
                        volume_row_id=volume_row_id,
                    ))
                elif spec.kind == "distance":
                    sets.append(ExerciseSet(
                        volume_type='distance',
                        reps=1,
                        distance=spec.distance,
                        distance_unit=spec.distance_unit,
                        notes=f"{format_number(spec.distance)}{spec.distance_unit}",
                        rest_time=rest_time,
                        volume_row_id=volume_row_id,
                    ))
                else:
                    sets.append(ExerciseSet(
                        volume_type='duration',
                        reps=1,
                        duration=spec.duration_seconds,
                        rest_time=rest_time,
                        volume_row_id=volume_row_id,
                    ))

        if not sets:
            # Every exercise keeps at least one set for progress tracking
            sets.append(ExerciseSet(
                volume_type='completion',
                reps=1,
                rest_time=0,
                volume_row_id=f"completion-{new_volume_row_id()}",
            ))
        return sets

    def derive_progress(
        self,
        parsed: List[ParsedExercise],
        exercises: List[Exercise],
        complete_all: bool = False,
    ) -> Progress:
        """
        Completion per set, derived from '+' markers.

        Each source line keeps its own markers: within a "3x10 ++" line the
        first two sets are done, and in "400m" / "400m +" only the second
        distance is. Which sets inside a single sets line were done is not
        recorded by the notation.
        """
        progress: Dict[str, List[bool]] = {}

        for index, exercise in enumerate(exercises):
            flags = [False] * len(exercise.sets)
            parsed_exercise = parsed[index] if index < len(parsed) else None

            if complete_all:
                flags = [True] * len(exercise.sets)
            elif parsed_exercise is not None:
                if parsed_exercise.exercise_level_done:
                    flags = [True] * len(exercise.sets)
                else:
                    offset = 0
                    for spec in parsed_exercise.specs:
                        for i in range(spec.sets_planned):
                            if offset < len(flags):
                                flags[offset] = self._spec_set_done(spec, i)
                            offset += 1

                    if parsed_exercise.done:
                        completion_index = next(
                            (i for i, s in enumerate(exercise.sets) if s.volume_type == 'completion'),
                            0,
                        )
                        if completion_index < len(flags):
                            flags[completion_index] = True

            progress[exercise.id] = flags

        return progress

    @staticmethod
    def _spec_set_done(spec: ParsedVolumeSpec, index: int) -> bool:
        if len(spec.completed) == spec.sets_planned:
            return spec.completed[index]
        # Specs built by hand may carry only a count
        return index < spec.sets_done

    def parse_to_state(
        self,
        text: str,
        existing_workout: Optional[Workout] = None,
        complete_all: bool = False,
    ) -> WorkoutExecutionState:
        """Parse text straight into a workout + progress snapshot"""
        parsed = self.parse_workout_text(text)
        exercises = self.convert_to_exercises(parsed, existing_workout)
        progress = self.derive_progress(parsed, exercises, complete_all=complete_all)

        if existing_workout is not None:
            workout = existing_workout.model_copy(update={"exercises": exercises})
        else:
            workout = Workout(exercises=exercises)

        return WorkoutExecutionState(workout=workout, progress=progress)


def parse_workout_text(text: str) -> List[ParsedExercise]:
    return WorkoutTextParser().parse_workout_text(text)


def convert_to_exercises(
    parsed: List[ParsedExercise],
    existing_workout: Optional[Workout] = None,
) -> List[Exercise]:
    return WorkoutTextParser().convert_to_exercises(parsed, existing_workout)


def derive_progress(
    parsed: List[ParsedExercise],
    exercises: List[Exercise],
    complete_all: bool = False,
) -> Progress:
    return WorkoutTextParser().derive_progress(parsed, exercises, complete_all=complete_all)


def parse_to_state(
    text: str,
    existing_workout: Optional[Workout] = None,
    complete_all: bool = False,
) -> WorkoutExecutionState:
    return WorkoutTextParser().parse_to_state(text, existing_workout, complete_all=complete_all)
