"""Data models for workout notation."""
import re
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Literal

VolumeType = Literal['sets-reps', 'sets-reps-weight', 'duration', 'distance', 'completion']
WeightUnit = Literal['kg', 'lb']
DistanceUnit = Literal['km', 'mi', 'm']

# Volume types edited as a single set (collapsed rows)
SINGLE_SET_TYPES = ('duration', 'distance')
MULTI_SET_TYPES = ('sets-reps', 'sets-reps-weight')

_LEGACY_DISTANCE_RE = re.compile(r'([0-9]+(?:\.[0-9]+)?)\s*(km|mi|m)\b')


class ExerciseSet(BaseModel):
    """One performable unit of an exercise."""
    volume_type: VolumeType = Field(default='sets-reps', alias='volumeType')
    reps: int = 1
    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = Field(default=None, alias='weightUnit')
    duration: Optional[float] = None  # seconds
    distance: Optional[float] = None
    distance_unit: Optional[DistanceUnit] = Field(default=None, alias='distanceUnit')
    completed: bool = False
    volume_row_id: Optional[str] = Field(default=None, alias='volumeRowId')
    rest_time: int = Field(default=90, alias='restTime')
    notes: str = ''

    class Config:
        extra = "ignore"  # Ignore extra fields from UI
        populate_by_name = True

    def distance_value(self) -> Optional[float]:
        """Distance of this set, falling back to the legacy '10km' notes encoding."""
        if self.distance is not None:
            return self.distance
        if self.notes:
            match = _LEGACY_DISTANCE_RE.search(self.notes)
            if match:
                return float(match.group(1))
        return None

    def distance_unit_value(self) -> Optional[str]:
        if self.distance_unit:
            return self.distance_unit
        if self.notes:
            match = _LEGACY_DISTANCE_RE.search(self.notes)
            if match:
                return match.group(2)
        return None


class Exercise(BaseModel):
    """An exercise owning an ordered list of sets."""
    id: str
    name: str
    category: str = "General"
    muscle_groups: List[str] = Field(default_factory=list, alias='muscleGroups')
    equipment: List[str] = Field(default_factory=list)
    instructions: str = ''
    sets: List[ExerciseSet] = Field(default_factory=list)

    class Config:
        extra = "ignore"
        populate_by_name = True


class Workout(BaseModel):
    """A complete workout snapshot as exchanged with the persistence layer."""
    id: str = "workout"
    name: str = "Workout"
    type: Optional[str] = None
    focus: Optional[str] = None
    status: str = 'planned'  # 'planned' | 'in-progress' | 'completed'
    notes: Optional[str] = None
    exercises: List[Exercise] = Field(default_factory=list)

    class Config:
        extra = "ignore"  # Ignore extra fields like 'checkIns', 'date' from UI

    def find_exercise(self, exercise_id: str) -> Optional[Exercise]:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None


Progress = Dict[str, List[bool]]


class WorkoutExecutionState(BaseModel):
    """Workout plus per-set completion, parallel to each exercise's set list."""
    workout: Workout
    progress: Progress = Field(default_factory=dict)


class VolumeRow(BaseModel):
    """
    Derived, collapsed view over a group of sets sharing one volume_row_id.

    Not persisted: rebuilt on demand from the exercise's flat set list.
    """
    type: VolumeType = 'sets-reps'
    total_sets: int = Field(default=1, alias='totalSets')
    reps: int = 1
    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = Field(default=None, alias='weightUnit')
    duration: Optional[float] = None  # minutes
    distance: Optional[float] = None
    distance_unit: Optional[DistanceUnit] = Field(default=None, alias='distanceUnit')
    set_indices: List[int] = Field(default_factory=list, alias='setIndices')
    volume_row_id: str = Field(default='', alias='volumeRowId')

    class Config:
        populate_by_name = True


class VolumeRowUpdate(BaseModel):
    """Partial edit of a volume row coming from the structured editor."""
    type: Optional[VolumeType] = None
    total_sets: Optional[float] = Field(default=None, alias='totalSets')
    reps: Optional[float] = None
    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = Field(default=None, alias='weightUnit')
    duration: Optional[float] = None  # minutes
    distance: Optional[float] = None
    distance_unit: Optional[DistanceUnit] = Field(default=None, alias='distanceUnit')

    class Config:
        extra = "ignore"
        populate_by_name = True
