"""
CLI interface for the Invoicing ROI Simulator.
"""

from __future__ import annotations

import sys
from typing import Any, List, Optional

import config as cfg
import report
from simulation import (
    ROIInputs,
    ROIResults,
    SensitivityRow,
    run_simulation,
    savings_timeline,
    sensitivity_table,
)


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: Optional[float], decimals: int = 0) -> str:
    """Format number as $X,XXX."""
    if val is None:
        return "n/a"
    return f"${val:,.{decimals}f}"


def pct(val: Optional[float], decimals: int = 1) -> str:
    if val is None:
        return "n/a"
    return f"{val:,.{decimals}f}%"


def mo(val: Optional[float]) -> str:
    return "never" if val is None else f"{val:.1f} months"


# ═══════════════════════════════════════════════════════════════════
# Input collection
# ═══════════════════════════════════════════════════════════════════

def _strip_currency(s: str) -> str:
    """Remove currency symbols, commas, spaces."""
    return s.replace("$", "").replace(",", "").replace(" ", "")


def _prompt_float(
    label: str,
    default: Any,
    min_val: float | None = None,
    max_val: float | None = None,
    exclusive_min: bool = False,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return float(default)
        try:
            val = float(_strip_currency(raw).replace("%", ""))
        except ValueError:
            print("    Invalid number, try again.")
            continue
        if min_val is not None and (val <= min_val if exclusive_min else val < min_val):
            print(f"    Must be {'greater than' if exclusive_min else 'at least'} {min_val}")
            continue
        if max_val is not None and val > max_val:
            print(f"    Must be at most {max_val}")
            continue
        return val


def collect_inputs() -> ROIInputs:
    """Prompt the user for all simulation parameters."""
    print("\n  Enter your details (press Enter for defaults):\n")
    d = cfg.DEFAULT_INPUTS

    return ROIInputs(
        monthly_invoice_volume=_prompt_float(
            "Monthly invoice volume", d["monthly_invoice_volume"], 0, exclusive_min=True),
        num_ap_staff=_prompt_float("Number of AP staff", d["num_ap_staff"], 0),
        avg_hours_per_invoice=_prompt_float(
            "Avg hours per invoice", d["avg_hours_per_invoice"], 0),
        hourly_wage=_prompt_float("Hourly wage", d["hourly_wage"], 0),
        error_rate_manual=_prompt_float(
            "Manual error rate %", d["error_rate_manual"], 0, 100),
        error_cost=_prompt_float("Cost per error", d["error_cost"], 0),
        time_horizon_months=_prompt_float(
            "Time horizon (months)", d["time_horizon_months"], 0),
        one_time_implementation_cost=_prompt_float(
            "One-time implementation cost", d["one_time_implementation_cost"], 0),
    )


# ═══════════════════════════════════════════════════════════════════
# Box-drawing output
# ═══════════════════════════════════════════════════════════════════

W = 70  # box width (characters)
H = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{H * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 34) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{H * (W - 2)}╝"


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


def _print_inputs(inputs: ROIInputs) -> None:
    values = inputs.to_dict()
    rows = [_box_row(label, pattern.format(values[key]))
            for key, label, pattern in report.INPUT_LABELS]
    _print_section("YOUR INPUTS", rows)


def _print_results(inputs: ROIInputs, results: ROIResults) -> None:
    rows = [
        _box_row("Monthly savings", fmt(results.monthly_savings)),
        _box_row(f"Cumulative savings ({inputs.time_horizon_months:g} mo)",
                 fmt(results.cumulative_savings)),
        _box_row("Net savings", fmt(results.net_savings)),
        _box_row("Payback period", mo(results.payback_months)),
        _box_row("ROI", pct(results.roi_percentage)),
    ]
    if results.monthly_savings == 0:
        rows.append(_box_line())
        rows.append(_box_line("Automation costs outweigh the manual process at"))
        rows.append(_box_line("these inputs; the investment never pays back."))
    else:
        months, net = savings_timeline(inputs)
        in_profit = months[net >= 0]
        rows.append(_box_line())
        if len(in_profit) > 0:
            rows.append(_box_row("First month in profit", f"{in_profit[0]:.0f}"))
        else:
            rows.append(_box_line("Not in profit within the time horizon."))
    _print_section("RESULTS", rows)


def _print_sensitivity(rows_in: List[SensitivityRow]) -> None:
    header = f"{'Volume':>9}  {'Monthly':>12}  {'Payback':>14}  {'ROI':>12}"
    rows = [_box_line(header), _box_line("─" * (W - 6))]
    for r in rows_in:
        marker = " <<" if r.factor == 1.0 else ""
        rows.append(_box_line(
            f"{r.monthly_invoice_volume:>9,.0f}  "
            f"{fmt(r.monthly_savings):>12}  "
            f"{mo(r.payback_months):>14}  "
            f"{pct(r.roi_percentage):>12}"
            f"{marker}"
        ))
    _print_section("WHAT IF INVOICE VOLUME CHANGES?", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(pdf_path: Optional[str] = cfg.REPORT_FILENAME) -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError):
        pass
    print()
    print("=" * W)
    print("  Invoicing ROI Simulator")
    print("=" * W)

    inputs = collect_inputs()
    results = run_simulation(inputs)

    print()
    _print_inputs(inputs)
    _print_results(inputs, results)
    _print_sensitivity(sensitivity_table(inputs))

    if pdf_path:
        email = input("  Email for the report [skip]: ").strip()
        if email:
            blob = report.generate_pdf(results, email, inputs)
            with open(pdf_path, "wb") as fh:
                fh.write(blob)
            print(f"  Saved to {pdf_path}\n")


if __name__ == "__main__":
    run_cli()
