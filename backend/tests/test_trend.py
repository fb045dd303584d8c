"""
Tests for the least-squares trend fits.
"""
import numpy as np
import pytest

from forecasting.trend import fit_linear, fit_quadratic


class TestLinearFit:

    def test_exact_line(self):
        fit = fit_linear([100, 110, 120])
        assert fit.slope == pytest.approx(10.0)
        assert fit.intercept == pytest.approx(100.0)
        assert fit.predict(3) == pytest.approx(130.0)

    def test_flat_series_has_zero_slope(self):
        fit = fit_linear([5, 5, 5, 5])
        assert fit.slope == pytest.approx(0.0)
        assert fit.intercept == pytest.approx(5.0)

    def test_noisy_series(self):
        # y = 2x + 1 with symmetric noise
        fit = fit_linear([1.5, 2.5, 5.5, 6.5])
        assert fit.slope == pytest.approx(1.8)
        assert fit.intercept == pytest.approx(1.3)

    def test_single_point_is_degenerate(self):
        with pytest.raises(ValueError):
            fit_linear([5])


class TestQuadraticFit:

    def test_exact_parabola(self):
        # (x + 1)^2 = 1 + 2x + x^2
        fit = fit_quadratic([1, 4, 9, 16])
        assert fit.a == pytest.approx(1.0)
        assert fit.b == pytest.approx(2.0)
        assert fit.c == pytest.approx(1.0)
        assert fit.predict(4) == pytest.approx(25.0)

    def test_line_has_no_curvature(self):
        fit = fit_quadratic([3, 5, 7, 9, 11])
        assert fit.c == pytest.approx(0.0, abs=1e-9)
        assert fit.b == pytest.approx(2.0)

    def test_two_points_are_degenerate(self):
        with pytest.raises(ValueError):
            fit_quadratic([1, 2])

    def test_matches_least_squares_on_noisy_data(self):
        values = [12.0, 9.5, 11.0, 15.5, 21.0, 30.5]
        c, b, a = np.polyfit(np.arange(len(values)), values, 2)
        fit = fit_quadratic(values)

        assert fit.a == pytest.approx(a)
        assert fit.b == pytest.approx(b)
        assert fit.c == pytest.approx(c)

    def test_empty_series_is_degenerate(self):
        with pytest.raises(ValueError):
            fit_quadratic([])
