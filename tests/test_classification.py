"""
Tests for UV index classification.

Run with: python -m pytest tests/test_classification.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from radiacion_uv.classification import UVLevel, classify_uv


class TestClassifyUV:
    """Band edges and colors."""

    @pytest.mark.parametrize("index,expected", [
        (0.0, UVLevel.LOW),
        (2.0, UVLevel.LOW),
        (2.1, UVLevel.MODERATE),
        (5.0, UVLevel.MODERATE),
        (5.5, UVLevel.HIGH),
        (7.0, UVLevel.HIGH),
        (7.2, UVLevel.VERY_HIGH),
        (10.0, UVLevel.VERY_HIGH),
        (10.1, UVLevel.EXTREME),
        (18.0, UVLevel.EXTREME),
    ])
    def test_band_edges_belong_to_lower_band(self, index, expected):
        result = classify_uv(index)
        logger.info(f"[TEST] UV {index} -> {result.nivel}")
        assert result.level == expected

    def test_high_band_fields(self):
        result = classify_uv(6.9)
        assert result.nivel == "Alto"
        assert result.color == "#fd7e14"
        assert result.risk == "Moderado"

    def test_just_above_seven_is_very_high(self):
        result = classify_uv(7.2)
        assert result.nivel == "Muy Alto"
        assert result.color == "#dc3545"
        assert result.risk == "Alto"

    def test_extreme_fields(self):
        result = classify_uv(12)
        assert result.nivel == "Extremo"
        assert result.color == "#6f42c1"
        assert result.risk == "Muy Alto"

    def test_low_fields(self):
        result = classify_uv(1)
        assert result.nivel == "Bajo"
        assert result.color == "#28a745"
        assert result.risk == "Mínimo"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
