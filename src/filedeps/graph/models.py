"""Pydantic models for dependency cycle results and severity scoring."""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class CycleSeverity(str, Enum):
    """Severity levels for project-wide dependency cycles."""

    CRITICAL = "critical"
    MODERATE = "moderate"
    LOW = "low"


class SeverityPolicy(BaseModel):
    """Weights and thresholds used to score a dependency cycle.

    The score is ``length_weight * length_score + dependent_weight * dependent_score``
    where shorter cycles and cycles with more outside dependents score higher.
    """

    length_weight: float = Field(default=0.4, ge=0.0)
    dependent_weight: float = Field(default=0.6, ge=0.0)
    short_cycle_max: int = Field(default=2, ge=1, description="Longest cycle still scored as short")
    medium_cycle_max: int = Field(default=4, ge=1, description="Longest cycle still scored as medium")
    short_cycle_score: float = Field(default=1.0, ge=0.0, le=1.0)
    medium_cycle_score: float = Field(default=0.6, ge=0.0, le=1.0)
    long_cycle_score: float = Field(default=0.3, ge=0.0, le=1.0)
    critical_threshold: float = Field(default=0.5, ge=0.0)
    moderate_threshold: float = Field(default=0.25, ge=0.0)

    @model_validator(mode="after")
    def check_thresholds(self) -> "SeverityPolicy":
        """Ensure the severity cutoffs and length bands are ordered."""
        if self.moderate_threshold > self.critical_threshold:
            raise ValueError(
                f"moderate_threshold ({self.moderate_threshold}) must not exceed "
                f"critical_threshold ({self.critical_threshold})"
            )
        if self.short_cycle_max > self.medium_cycle_max:
            raise ValueError(
                f"short_cycle_max ({self.short_cycle_max}) must not exceed "
                f"medium_cycle_max ({self.medium_cycle_max})"
            )
        return self

    def length_score(self, cycle_length: int) -> float:
        """Score a cycle by its length (shorter is more critical)."""
        if cycle_length <= self.short_cycle_max:
            return self.short_cycle_score
        if cycle_length <= self.medium_cycle_max:
            return self.medium_cycle_score
        return self.long_cycle_score

    def dependent_score(self, dependent_count: int, total_files: int) -> float:
        """Score a cycle by the share of the project depending on it."""
        if total_files <= 0:
            return 0.0
        return min(dependent_count / total_files, 1.0)

    def score(self, cycle_length: int, dependent_count: int, total_files: int) -> float:
        """Compute the combined severity score for a cycle."""
        return (
            self.length_weight * self.length_score(cycle_length)
            + self.dependent_weight * self.dependent_score(dependent_count, total_files)
        )

    def classify(self, score: float) -> CycleSeverity:
        """Map a score to its severity label."""
        if score >= self.critical_threshold:
            return CycleSeverity.CRITICAL
        if score >= self.moderate_threshold:
            return CycleSeverity.MODERATE
        return CycleSeverity.LOW


class CycleInfo(BaseModel):
    """A project-wide dependency cycle with its severity annotation."""

    files: list[str] = Field(..., description="Member files in discovery order")
    severity: CycleSeverity = Field(..., description="Severity label derived from the score")
    score: float = Field(..., description="Combined severity score")
    dependent_count: int = Field(
        ..., description="Files outside the cycle that import any of its members"
    )

    @property
    def length(self) -> int:
        """Number of files in the cycle."""
        return len(self.files)
