"""
UV index classification (WHO bands).

    <= 2   Bajo      green
    <= 5   Moderado  yellow
    <= 7   Alto      orange
    <= 10  Muy Alto  red
    > 10   Extremo   purple

Boundary values belong to the lower band.
"""

from dataclasses import dataclass
from enum import Enum


class UVLevel(Enum):
    """UV exposure level."""
    LOW = "Bajo"
    MODERATE = "Moderado"
    HIGH = "Alto"
    VERY_HIGH = "Muy Alto"
    EXTREME = "Extremo"


@dataclass(frozen=True)
class Classification:
    """Derived view of a UV index. Always recomputed, never stored alone."""
    level: UVLevel
    color: str
    risk: str

    @property
    def nivel(self) -> str:
        return self.level.value


# (upper bound inclusive, level, color, risk), evaluated in order
UV_BANDS = (
    (2, UVLevel.LOW, "#28a745", "Mínimo"),
    (5, UVLevel.MODERATE, "#ffc107", "Bajo"),
    (7, UVLevel.HIGH, "#fd7e14", "Moderado"),
    (10, UVLevel.VERY_HIGH, "#dc3545", "Alto"),
)

EXTREME = Classification(UVLevel.EXTREME, "#6f42c1", "Muy Alto")


def classify_uv(index: float) -> Classification:
    """
    Classify a UV index.

    Args:
        index: UV index (any float, normally 0-20)

    Returns:
        Classification with level, hex color and risk label
    """
    for upper, level, color, risk in UV_BANDS:
        if index <= upper:
            return Classification(level, color, risk)
    return EXTREME
