"""
Parser Models

Pydantic models for the transient output of the notation parsers.
"""

from typing import List, Optional, Literal
from pydantic import BaseModel, Field

LineKind = Literal["sets", "distance", "time"]


class VolumeLineMatch(BaseModel):
    """
    Result of classifying a single line.

    matched=False means the line is not a volume spec; callers attach it to
    the current exercise as a free-text cue.
    """
    matched: bool = False
    kind: Optional[LineKind] = None
    plus_count: int = Field(default=0, ge=0)
    raw: str = ""

    # sets form
    sets_planned: Optional[int] = None
    reps: Optional[int] = None
    weight: Optional[str] = Field(default=None, description="Normalized weight, e.g. '10kg'")
    weight_value: Optional[float] = None
    weight_unit: Optional[Literal["kg", "lb"]] = None

    # distance form (value is a number) / time form (value is e.g. '1h30m')
    value: Optional[float] = None
    unit: Optional[Literal["km", "mi", "m"]] = None
    time_value: Optional[str] = None
    hours: Optional[int] = None
    minutes: Optional[int] = None
    duration_seconds: Optional[int] = None

    def shape(self) -> tuple:
        """Values that must be equal for two lines to coalesce into one spec."""
        if self.kind == "sets":
            return ("sets", self.reps, self.weight_value, self.weight_unit)
        if self.kind == "distance":
            return ("distance", self.value, self.unit)
        if self.kind == "time":
            return ("time", self.duration_seconds)
        return ("cue", self.raw)


class ParsedVolumeSpec(BaseModel):
    """One coalesced volume entry of a parsed exercise (becomes one volume row)."""
    kind: LineKind
    sets_planned: int = Field(default=1, ge=1)
    sets_done: int = Field(default=0, ge=0)
    completed: List[bool] = Field(
        default_factory=list,
        description="Done flag per planned set, in source line order",
    )
    reps: int = 1
    weight: Optional[str] = None
    weight_value: Optional[float] = None
    weight_unit: Optional[Literal["kg", "lb"]] = None
    distance: Optional[float] = None
    distance_unit: Optional[Literal["km", "mi", "m"]] = None
    duration_seconds: Optional[int] = None
    raw: List[str] = Field(default_factory=list, description="Source lines folded into this spec")


class ParsedExercise(BaseModel):
    """Exercise block assembled from a header line and the lines below it"""
    name: str
    specs: List[ParsedVolumeSpec] = Field(default_factory=list)
    cues: str = ""

    # Completion flags
    done: bool = False                 # header '+' on an exercise with no volume
    exercise_level_done: bool = False  # header '+' on an exercise with volume
    distance_done: bool = False
    time_done: bool = False

    # Hidden identity token ('#id:<exercise-id>' on the header)
    token_id: Optional[str] = None

    @property
    def has_volume(self) -> bool:
        return bool(self.specs)
