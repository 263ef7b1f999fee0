"""Unit tests for data models."""
import pytest
from pydantic import ValidationError

from workout_notation.models import Exercise, ExerciseSet, VolumeRow, VolumeRowUpdate, Workout


class TestModels:
    """Test cases for data models."""

    def test_exercise_set_defaults(self):
        """Test ExerciseSet default values."""
        exercise_set = ExerciseSet()

        assert exercise_set.volume_type == "sets-reps"
        assert exercise_set.reps == 1
        assert exercise_set.rest_time == 90
        assert exercise_set.completed is False
        assert exercise_set.volume_row_id is None

    def test_exercise_set_camel_case_input(self):
        """Test ExerciseSet accepts the UI's camelCase keys."""
        exercise_set = ExerciseSet.model_validate({
            "volumeType": "sets-reps-weight",
            "reps": 8,
            "weight": 40,
            "weightUnit": "lb",
            "volumeRowId": "row-1",
            "restTime": 60,
        })

        assert exercise_set.volume_type == "sets-reps-weight"
        assert exercise_set.weight == 40.0
        assert exercise_set.weight_unit == "lb"
        assert exercise_set.volume_row_id == "row-1"
        assert exercise_set.rest_time == 60

    def test_invalid_volume_type(self):
        """Test unknown volume types are rejected."""
        with pytest.raises(ValidationError):
            ExerciseSet(volume_type="yoga")

    def test_distance_value_prefers_field(self):
        exercise_set = ExerciseSet(volume_type="distance", distance=5, distance_unit="mi", notes="10km")

        assert exercise_set.distance_value() == 5.0
        assert exercise_set.distance_unit_value() == "mi"

    def test_distance_value_from_notes(self):
        """Test legacy sets that only carry '10km' in notes."""
        exercise_set = ExerciseSet(volume_type="distance", notes="Easy pace 10.5 km")

        assert exercise_set.distance_value() == 10.5
        assert exercise_set.distance_unit_value() == "km"

    def test_distance_value_missing(self):
        assert ExerciseSet(volume_type="distance").distance_value() is None
        assert ExerciseSet(notes="slow").distance_unit_value() is None

    def test_exercise_creation(self):
        """Test Exercise model creation."""
        exercise = Exercise(id="ex-1", name="Squat", muscleGroups=["legs"])

        assert exercise.category == "General"
        assert exercise.muscle_groups == ["legs"]
        assert exercise.sets == []

    def test_workout_ignores_extra_fields(self):
        """Test Workout drops UI-only fields like checkIns."""
        workout = Workout.model_validate({"name": "Leg Day", "checkIns": [], "date": "2026-01-01"})

        assert workout.name == "Leg Day"
        assert workout.status == "planned"
        assert not hasattr(workout, "checkIns")

    def test_find_exercise(self, sample_workout):
        assert sample_workout.find_exercise("ex-run").name == "Run"
        assert sample_workout.find_exercise("nope") is None

    def test_volume_row_aliases(self):
        row = VolumeRow(totalSets=4, setIndices=[0, 1, 2, 3], volumeRowId="r")

        assert row.total_sets == 4
        assert row.set_indices == [0, 1, 2, 3]
        assert row.volume_row_id == "r"

    def test_volume_row_update_is_partial(self):
        update = VolumeRowUpdate(reps=12)

        assert update.model_dump(exclude_none=True) == {"reps": 12.0}
