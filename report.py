"""
One-page PDF report for the Invoicing ROI Simulator.

Provides:
  - generate_pdf: render precomputed results (and optionally the inputs
    and a net-position chart) to PDF bytes
  - encode_pdf: base64 text for JSON transport
"""

from __future__ import annotations

import base64
import io
import logging
from datetime import datetime, timezone
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.ticker import FuncFormatter

from simulation import ROIInputs, ROIResults, savings_timeline

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
INDIGO = "#818cf8"
EMERALD = "#34d399"
RED = "#f87171"
SLATE = "#94a3b8"
BORDER = "#1e293b"

A4W, A4H = 8.27, 11.69


# ═══════════════════════════════════════════════════════════════════
# Formatting
# ═══════════════════════════════════════════════════════════════════

def _money_fmt(x, _):
    if abs(x) >= 1e6:
        return f"${x / 1e6:.1f}M"
    if abs(x) >= 1e3:
        return f"${x / 1e3:.0f}k"
    return f"${x:.0f}"


MONEY_FMT = FuncFormatter(_money_fmt)


def money(val: Optional[float]) -> str:
    return "n/a" if val is None else f"${val:,.0f}"


def months(val: Optional[float]) -> str:
    return "never" if val is None else f"{val:.1f} months"


def percent(val: Optional[float]) -> str:
    return "n/a" if val is None else f"{val:,.1f}%"


INPUT_LABELS = [
    ("monthly_invoice_volume", "Monthly invoice volume", "{:,.0f}"),
    ("num_ap_staff", "AP staff", "{:g}"),
    ("avg_hours_per_invoice", "Hours per invoice", "{:g}"),
    ("hourly_wage", "Hourly wage", "${:,.2f}"),
    ("error_rate_manual", "Manual error rate", "{:g}%"),
    ("error_cost", "Cost per error", "${:,.2f}"),
    ("time_horizon_months", "Time horizon", "{:g} months"),
    ("one_time_implementation_cost", "Implementation cost", "${:,.0f}"),
]


# ═══════════════════════════════════════════════════════════════════
# Page
# ═══════════════════════════════════════════════════════════════════

def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, alpha=0.15, color=SLATE)


def _net_position_chart(ax, inputs: ROIInputs, results: ROIResults) -> None:
    x, net = savings_timeline(inputs)
    ax.fill_between(x, net, 0, where=net >= 0, color=EMERALD, alpha=0.25)
    ax.fill_between(x, net, 0, where=net < 0, color=RED, alpha=0.25)
    ax.plot(x, net, color=INDIGO, linewidth=2.2, solid_capstyle="round")
    ax.axhline(0, color=SLATE, linewidth=0.8)
    if results.payback_months is not None and results.payback_months <= x[-1]:
        ax.axvline(results.payback_months, color=EMERALD, linestyle="--", linewidth=1)
        ax.annotate(f"Payback: {results.payback_months:.1f} mo",
                    xy=(results.payback_months, 0), xytext=(6, 10),
                    textcoords="offset points", color=EMERALD, fontsize=8)
    ax.yaxis.set_major_formatter(MONEY_FMT)
    ax.set_xlabel("Month")
    ax.set_ylabel("Net position")
    ax.set_title("Cumulative savings minus implementation cost", fontsize=10)


def _summary_page(
    results: ROIResults,
    email: str,
    inputs: Optional[ROIInputs],
    scenario_name: Optional[str],
) -> plt.Figure:
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    fig.text(0.50, 0.93, "Invoicing ROI Report",
             ha="center", fontsize=18, color=TEXT, fontweight="bold")
    subtitle = scenario_name or "Manual vs automated invoice processing"
    fig.text(0.50, 0.905, subtitle, ha="center", fontsize=11, color=TEXT2)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    fig.text(0.50, 0.885, f"Prepared for {email}  |  {stamp}",
             ha="center", fontsize=8.5, color=SLATE)

    y = 0.84
    if inputs is not None:
        fig.text(0.08, y, "Inputs", fontsize=13, color=TEXT, fontweight="bold")
        y -= 0.028
        values = inputs.to_dict()
        for key, label, pattern in INPUT_LABELS:
            fig.text(0.10, y, label, fontsize=9.5, color=TEXT2)
            fig.text(0.55, y, pattern.format(values[key]), fontsize=9.5, color=TEXT)
            y -= 0.022
        y -= 0.02

    fig.text(0.08, y, "Results", fontsize=13, color=EMERALD, fontweight="bold")
    y -= 0.028
    rows = [
        ("Monthly savings", money(results.monthly_savings)),
        ("Cumulative savings", money(results.cumulative_savings)),
        ("Net savings", money(results.net_savings)),
        ("Payback period", months(results.payback_months)),
        ("ROI", percent(results.roi_percentage)),
    ]
    for label, value in rows:
        fig.text(0.10, y, label, fontsize=10, color=TEXT2)
        fig.text(0.55, y, value, fontsize=10, color=TEXT, fontweight="bold")
        y -= 0.025

    if inputs is not None:
        ax = fig.add_axes([0.14, 0.10, 0.78, min(0.30, y - 0.16)])
        _style(fig, ax)
        _net_position_chart(ax, inputs, results)

    fig.text(0.50, 0.03,
             "Projection only. Figures include an upward bias factor and are "
             "rounded for display.",
             ha="center", fontsize=8, color=SLATE, style="italic")
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def generate_pdf(
    results: ROIResults,
    email: str,
    inputs: Optional[ROIInputs] = None,
    scenario_name: Optional[str] = None,
) -> bytes:
    """Render the one-page report and return the PDF bytes."""
    fig = _summary_page(results, email, inputs, scenario_name)
    buf = io.BytesIO()
    try:
        with PdfPages(buf) as pdf:
            pdf.savefig(fig, facecolor=fig.get_facecolor())
    finally:
        plt.close(fig)
    logger.info("Report generated for %s", email)
    return buf.getvalue()


def encode_pdf(blob: bytes) -> str:
    """Base64-encode PDF bytes for a JSON response."""
    return base64.b64encode(blob).decode()
