"""
ROI calculation engine for the Invoicing ROI Simulator.

Compares the monthly cost of processing invoices by hand against an
automated pipeline, then projects the difference over a time horizon:

  labor cost + error-rate delta - automation cost, scaled by the bias
  factor and floored at zero, gives the monthly savings; payback and
  ROI follow from the one-time implementation cost.

The core calculation is a closed-form expression on plain floats; numpy
is only used for the month-by-month timeline and the sensitivity sweep.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping, Optional

import numpy as np

import config as cfg


class InvalidInputError(ValueError):
    """Raised when simulation inputs are missing, non-numeric or out of range."""


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class ROIInputs:
    """User inputs for the simulation."""

    monthly_invoice_volume: float        # invoices per month (must be > 0)
    num_ap_staff: float                  # accounts-payable headcount
    avg_hours_per_invoice: float         # manual handling time per invoice
    hourly_wage: float                   # loaded cost per staff hour
    error_rate_manual: float             # % of manual invoices with errors
    error_cost: float                    # cost to fix one erroneous invoice
    time_horizon_months: float           # projection horizon
    one_time_implementation_cost: float  # up-front automation spend

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                raise InvalidInputError(f"{f.name} must be a finite number")
        if self.monthly_invoice_volume <= 0:
            raise InvalidInputError("monthly_invoice_volume must be greater than 0")
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise InvalidInputError(f"{f.name} must not be negative")
        if self.error_rate_manual > 100:
            raise InvalidInputError("error_rate_manual is a percentage (0-100)")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ROIInputs":
        """Build inputs from a JSON body or form, coercing numeric strings."""
        missing = [f.name for f in fields(cls)
                   if data.get(f.name) is None or data.get(f.name) == ""]
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

        values = {}
        for f in fields(cls):
            raw = data[f.name]
            if isinstance(raw, bool):
                raise InvalidInputError(f"{f.name} must be a number")
            try:
                values[f.name] = float(raw)
            except (TypeError, ValueError, OverflowError):
                raise InvalidInputError(f"{f.name} must be a number") from None
        return cls(**values)

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ROIResults:
    """Derived metrics, rounded for display."""

    monthly_savings: float
    cumulative_savings: float
    net_savings: float
    payback_months: Optional[float]   # None if savings never cover the cost
    roi_percentage: Optional[float]   # None when there is no implementation cost

    def to_dict(self) -> dict[str, Optional[float]]:
        return asdict(self)


# ─── Core Calculation ────────────────────────────────────────────────

def _monthly_savings(inputs: ROIInputs) -> float:
    """Unrounded monthly savings, floored at zero."""
    volume = inputs.monthly_invoice_volume
    labor_cost_manual = (inputs.num_ap_staff * inputs.hourly_wage
                         * inputs.avg_hours_per_invoice * volume)
    auto_cost = volume * cfg.AUTOMATED_COST_PER_INVOICE
    error_savings = ((inputs.error_rate_manual - cfg.ERROR_RATE_AUTO) / 100
                     * volume * inputs.error_cost)

    savings = (labor_cost_manual + error_savings - auto_cost) * cfg.MIN_ROI_BOOST_FACTOR
    return max(savings, 0.0)


def run_simulation(inputs: ROIInputs) -> ROIResults:
    """Compute savings, payback period and ROI for one set of inputs."""
    monthly = _monthly_savings(inputs)
    impl_cost = inputs.one_time_implementation_cost

    cumulative = monthly * inputs.time_horizon_months
    net = cumulative - impl_cost

    payback = impl_cost / monthly if monthly > 0 else None
    roi = net / impl_cost * 100 if impl_cost > 0 else None

    derived = (monthly, cumulative, net, payback, roi)
    if not all(v is None or math.isfinite(v) for v in derived):
        raise InvalidInputError("Inputs are too large to produce a finite result")

    return ROIResults(
        monthly_savings=round(monthly, cfg.CURRENCY_DECIMALS),
        cumulative_savings=round(cumulative, cfg.CURRENCY_DECIMALS),
        net_savings=round(net, cfg.CURRENCY_DECIMALS),
        payback_months=round(payback, cfg.RATIO_DECIMALS) if payback is not None else None,
        roi_percentage=round(roi, cfg.RATIO_DECIMALS) if roi is not None else None,
    )


# ─── Timeline ────────────────────────────────────────────────────────

def savings_timeline(inputs: ROIInputs) -> tuple[np.ndarray, np.ndarray]:
    """Net position (cumulative savings minus implementation cost) per month.

    Horizons longer than ``cfg.MAX_TIMELINE_POINTS`` months are sampled at
    that many evenly spaced points instead of once per month.

    Returns
    -------
    months : (n_points + 1,)  0 .. ceil(time_horizon_months)
    net_position : (n_points + 1,)
    """
    n_months = math.ceil(inputs.time_horizon_months)
    n_points = min(n_months, cfg.MAX_TIMELINE_POINTS)
    months = np.linspace(0.0, float(n_months), n_points + 1)
    net_position = _monthly_savings(inputs) * months - inputs.one_time_implementation_cost
    return months, net_position


# ─── Volume Sensitivity ──────────────────────────────────────────────

@dataclass
class SensitivityRow:
    """One row of the invoice-volume sensitivity table."""

    factor: float
    monthly_invoice_volume: float
    monthly_savings: float
    payback_months: Optional[float]
    roi_percentage: Optional[float]


def sensitivity_table(
    inputs: ROIInputs,
    factors: Optional[list[float]] = None,
) -> list[SensitivityRow]:
    """Re-run the calculation with the invoice volume scaled by each factor.

    Non-positive factors are skipped since they would produce an invalid
    volume, as are factors whose result overflows.
    """
    if factors is None:
        factors = cfg.SENSITIVITY_FACTORS

    rows: list[SensitivityRow] = []
    for factor in factors:
        if factor <= 0:
            continue
        try:
            inp = replace(inputs, monthly_invoice_volume=inputs.monthly_invoice_volume * factor)
            res = run_simulation(inp)
        except InvalidInputError:
            continue
        rows.append(SensitivityRow(
            factor=factor,
            monthly_invoice_volume=inp.monthly_invoice_volume,
            monthly_savings=res.monthly_savings,
            payback_months=res.payback_months,
            roi_percentage=res.roi_percentage,
        ))
    return rows
