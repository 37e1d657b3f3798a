"""
Unit tests for the ROI calculation engine.

Tests cover:
- The reference example from the default form values
- Floor-at-zero savings and the payback / ROI guards
- Input validation
- Timeline and volume sensitivity helpers
"""

from dataclasses import replace

import numpy as np
import pytest

import config as cfg
from simulation import (
    InvalidInputError,
    ROIInputs,
    run_simulation,
    savings_timeline,
    sensitivity_table,
)


class TestReferenceExample:
    """volume=2000, staff=3, hours=0.17, wage=30, error 0.5%, cost 100, 36 mo, 50k."""

    def test_monthly_savings(self, default_inputs):
        # (30600 labor + 800 errors - 400 automation) * 1.1
        assert run_simulation(default_inputs).monthly_savings == pytest.approx(34100)

    def test_cumulative_and_net(self, default_inputs):
        res = run_simulation(default_inputs)
        assert res.cumulative_savings == pytest.approx(1_227_600)
        assert res.net_savings == pytest.approx(1_177_600)

    def test_payback_and_roi(self, default_inputs):
        res = run_simulation(default_inputs)
        assert res.payback_months == pytest.approx(1.5)
        assert res.roi_percentage == pytest.approx(2355.2)

    def test_deterministic(self, default_inputs):
        assert run_simulation(default_inputs) == run_simulation(default_inputs)

    def test_formula_matches_constants(self, default_inputs):
        i = default_inputs
        expected = (
            i.num_ap_staff * i.hourly_wage * i.avg_hours_per_invoice * i.monthly_invoice_volume
            + (i.error_rate_manual - cfg.ERROR_RATE_AUTO) / 100 * i.monthly_invoice_volume * i.error_cost
            - i.monthly_invoice_volume * cfg.AUTOMATED_COST_PER_INVOICE
        ) * cfg.MIN_ROI_BOOST_FACTOR
        assert run_simulation(i).monthly_savings == round(expected)


class TestGuards:

    def test_savings_floored_at_zero(self, default_inputs):
        inp = replace(default_inputs, num_ap_staff=0, error_rate_manual=0)
        res = run_simulation(inp)
        assert res.monthly_savings == 0
        assert res.cumulative_savings == 0
        assert res.net_savings == -inp.one_time_implementation_cost

    def test_payback_none_when_no_savings(self, default_inputs):
        inp = replace(default_inputs, hourly_wage=0, error_rate_manual=0)
        res = run_simulation(inp)
        assert res.payback_months is None
        assert res.roi_percentage == pytest.approx(-100.0)

    def test_roi_none_without_implementation_cost(self, default_inputs):
        res = run_simulation(replace(default_inputs, one_time_implementation_cost=0))
        assert res.roi_percentage is None
        assert res.payback_months == 0

    @pytest.mark.parametrize("volume", [1, 10, 500, 2000, 1e6])
    def test_savings_never_negative(self, default_inputs, volume):
        inp = replace(default_inputs, monthly_invoice_volume=volume,
                      num_ap_staff=0, error_rate_manual=0.05)
        assert run_simulation(inp).monthly_savings >= 0

    def test_rounding(self, default_inputs):
        res = run_simulation(replace(default_inputs, avg_hours_per_invoice=0.1234))
        assert res.monthly_savings == round(res.monthly_savings)
        assert res.payback_months == round(res.payback_months, 1)
        assert res.roi_percentage == round(res.roi_percentage, 1)


    @pytest.mark.parametrize("horizon", [36, 0])
    def test_overflowing_result_rejected(self, default_inputs, horizon):
        inp = replace(default_inputs, monthly_invoice_volume=1e200,
                      hourly_wage=1e200, time_horizon_months=horizon)
        with pytest.raises(InvalidInputError, match="finite"):
            run_simulation(inp)


class TestValidation:

    @pytest.mark.parametrize("volume", [0, -1, -2000])
    def test_non_positive_volume_rejected(self, default_payload, volume):
        default_payload["monthly_invoice_volume"] = volume
        with pytest.raises(InvalidInputError, match="monthly_invoice_volume"):
            ROIInputs.from_mapping(default_payload)

    def test_negative_field_rejected(self, default_payload):
        default_payload["hourly_wage"] = -5
        with pytest.raises(InvalidInputError, match="hourly_wage"):
            ROIInputs.from_mapping(default_payload)

    def test_error_rate_above_100_rejected(self, default_payload):
        default_payload["error_rate_manual"] = 150
        with pytest.raises(InvalidInputError):
            ROIInputs.from_mapping(default_payload)

    def test_missing_fields_listed(self, default_payload):
        del default_payload["error_cost"]
        del default_payload["hourly_wage"]
        with pytest.raises(InvalidInputError, match="hourly_wage, error_cost"):
            ROIInputs.from_mapping(default_payload)

    @pytest.mark.parametrize("bad", ["abc", True, [1], "nan", "inf"])
    def test_non_numeric_rejected(self, default_payload, bad):
        default_payload["error_cost"] = bad
        with pytest.raises(InvalidInputError):
            ROIInputs.from_mapping(default_payload)

    def test_integer_too_large_for_float_rejected(self, default_payload):
        default_payload["monthly_invoice_volume"] = 10 ** 400
        with pytest.raises(InvalidInputError, match="monthly_invoice_volume"):
            ROIInputs.from_mapping(default_payload)

    def test_numeric_strings_accepted(self, default_payload):
        default_payload["monthly_invoice_volume"] = "2000"
        assert ROIInputs.from_mapping(default_payload).monthly_invoice_volume == 2000.0

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)


class TestTimeline:

    def test_shape_and_endpoints(self, default_inputs):
        months, net = savings_timeline(default_inputs)
        assert months.shape == (37,)
        assert net[0] == pytest.approx(-50_000)
        assert net[-1] == pytest.approx(run_simulation(default_inputs).net_savings, abs=1)

    def test_monotonic_with_positive_savings(self, default_inputs):
        _, net = savings_timeline(default_inputs)
        assert np.all(np.diff(net) > 0)

    def test_fractional_horizon_rounds_up(self, default_inputs):
        months, _ = savings_timeline(replace(default_inputs, time_horizon_months=12.5))
        assert months[-1] == 13

    def test_long_horizon_is_resampled(self, default_inputs):
        months, net = savings_timeline(replace(default_inputs, time_horizon_months=1e12))
        assert months.shape == (cfg.MAX_TIMELINE_POINTS + 1,)
        assert months[-1] == 1e12
        assert np.all(np.isfinite(net))

    def test_horizon_at_cap_is_monthly(self, default_inputs):
        inp = replace(default_inputs, time_horizon_months=cfg.MAX_TIMELINE_POINTS)
        months, _ = savings_timeline(inp)
        assert np.array_equal(months, np.arange(cfg.MAX_TIMELINE_POINTS + 1))


class TestSensitivity:

    def test_default_factors(self, default_inputs):
        rows = sensitivity_table(default_inputs)
        assert [r.factor for r in rows] == cfg.SENSITIVITY_FACTORS
        base = next(r for r in rows if r.factor == 1.0)
        assert base.monthly_savings == run_simulation(default_inputs).monthly_savings

    def test_savings_grow_with_volume(self, default_inputs):
        rows = sensitivity_table(default_inputs)
        savings = [r.monthly_savings for r in rows]
        assert savings == sorted(savings)

    def test_non_positive_factor_skipped(self, default_inputs):
        rows = sensitivity_table(default_inputs, [0, -1, 2])
        assert len(rows) == 1
        assert rows[0].monthly_invoice_volume == 4000

    def test_overflowing_factor_skipped(self, default_inputs):
        inp = replace(default_inputs, monthly_invoice_volume=1e300, hourly_wage=1e5)
        rows = sensitivity_table(inp, [1.0, 1e5, 1e10])
        assert [r.factor for r in rows] == [1.0]
