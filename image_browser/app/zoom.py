"""Discrete zoom levels expressed as integer percentages.

Zoom is never accumulated as a float: every step adds or subtracts a fixed
integer percentage and the result is clamped to ``[minimum, maximum]``.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MIN_PERCENT = 50
DEFAULT_MAX_PERCENT = 300
DEFAULT_STEP_PERCENT = 20
BASELINE_PERCENT = 100


@dataclass(frozen=True)
class ZoomRange:
    minimum: int = DEFAULT_MIN_PERCENT
    maximum: int = DEFAULT_MAX_PERCENT
    step: int = DEFAULT_STEP_PERCENT
    baseline: int = BASELINE_PERCENT

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError(f"zoom step must be positive, got {self.step}")
        if not (0 < self.minimum <= self.baseline <= self.maximum):
            raise ValueError(
                f"zoom range must satisfy 0 < min <= baseline <= max, got "
                f"min={self.minimum} baseline={self.baseline} max={self.maximum}"
            )

    def clamp(self, percent: int) -> int:
        return max(self.minimum, min(int(percent), self.maximum))

    def zoom_in(self, percent: int) -> int:
        return min(int(percent) + self.step, self.maximum)

    def zoom_out(self, percent: int) -> int:
        return max(int(percent) - self.step, self.minimum)

    def reset(self) -> int:
        return self.baseline


def percent_to_factor(percent: int) -> float:
    """Scale factor for rendering (``150`` -> ``1.5``)."""
    return percent / 100.0
