"""Tests for scale-dependent grid metrics."""

import math

import pytest

from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, derive_grid_metrics


class TestDeriveGridMetrics:
    def test_unit_scale(self) -> None:
        m = derive_grid_metrics(1.0)
        assert (m.cell_size, m.square_margin, m.line_margin) == (4, 12, 12)
        assert m == DEFAULT_GRID_METRICS

    def test_margins_scale_linearly(self) -> None:
        m = derive_grid_metrics(2.5)
        assert m.cell_size == pytest.approx(10)
        assert m.line_margin == pytest.approx(30)
        assert m.square_margin == pytest.approx(30)

    def test_cell_size_floor(self) -> None:
        m = derive_grid_metrics(0.5)
        assert m.cell_size == 4
        assert m.line_margin == pytest.approx(6)

    @pytest.mark.parametrize("scale", [0, -2, math.nan, math.inf])
    def test_degenerate_scale_falls_back_to_one(self, scale: float) -> None:
        assert derive_grid_metrics(scale) == derive_grid_metrics(1.0)

    def test_resample_length_is_constant(self) -> None:
        assert derive_grid_metrics(3).resample_length == derive_grid_metrics(1).resample_length
