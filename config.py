"""
Constants and deployment settings for the Invoicing ROI Simulator.

All monetary values are in the user's currency; the simulator is
currency-agnostic.  Error rates are expressed in percent (0.5 = 0.5%).
"""

import os

# ── Automation assumptions ───────────────────────────────────────────
AUTOMATED_COST_PER_INVOICE = 0.20   # processing cost per invoice once automated
ERROR_RATE_AUTO = 0.1               # % of automated invoices needing rework
MIN_ROI_BOOST_FACTOR = 1.1          # upward bias applied to monthly savings

# ── Display rounding ─────────────────────────────────────────────────
CURRENCY_DECIMALS = 0
RATIO_DECIMALS = 1                  # payback months, ROI %

# ── Form defaults ────────────────────────────────────────────────────
DEFAULT_INPUTS = {
    "monthly_invoice_volume": 2000,
    "num_ap_staff": 3,
    "avg_hours_per_invoice": 0.17,
    "hourly_wage": 30,
    "error_rate_manual": 0.5,
    "error_cost": 100,
    "time_horizon_months": 36,
    "one_time_implementation_cost": 50000,
}

# Invoice-volume multipliers for the sensitivity table
SENSITIVITY_FACTORS = [0.5, 0.75, 1.0, 1.25, 1.5]

# Longest timeline sampled month by month; longer horizons are resampled
MAX_TIMELINE_POINTS = 600

REPORT_FILENAME = "invoice_roi_report.pdf"

# ── Deployment (environment) ─────────────────────────────────────────
DATABASE_URL = os.environ.get("ROI_DATABASE_URL", "sqlite:///roi_scenarios.db")
HOST = os.environ.get("ROI_HOST", "127.0.0.1")
PORT = int(os.environ.get("ROI_PORT", "5000"))
CORS_ORIGINS = os.environ.get("ROI_CORS_ORIGINS", "*")
LOG_LEVEL = os.environ.get("ROI_LOG_LEVEL", "INFO").upper()
DEBUG = os.environ.get("ROI_DEBUG", "0").lower() in ("1", "true", "yes")
