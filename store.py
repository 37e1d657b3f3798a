"""
Scenario persistence for the Invoicing ROI Simulator.

One table, one model.  Every function runs a single statement against the
Flask-SQLAlchemy session and commits; callers handle ``SQLAlchemyError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask_sqlalchemy import SQLAlchemy

from simulation import ROIInputs, ROIResults

logger = logging.getLogger(__name__)

db = SQLAlchemy()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Scenario(db.Model):
    __tablename__ = "scenarios"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    scenario_name = db.Column(db.String(100), nullable=False)
    monthly_invoice_volume = db.Column(db.Float, nullable=False)
    num_ap_staff = db.Column(db.Float, nullable=False)
    avg_hours_per_invoice = db.Column(db.Float, nullable=False)
    hourly_wage = db.Column(db.Float, nullable=False)
    error_rate_manual = db.Column(db.Float, nullable=False)
    error_cost = db.Column(db.Float, nullable=False)
    time_horizon_months = db.Column(db.Float, nullable=False)
    one_time_implementation_cost = db.Column(db.Float, nullable=False)
    monthly_savings = db.Column(db.Float, nullable=False)
    payback_months = db.Column(db.Float, nullable=True)
    roi_percentage = db.Column(db.Float, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    SUMMARY_FIELDS = ("id", "scenario_name", "monthly_savings",
                      "payback_months", "roi_percentage", "created_at")

    def to_dict(self) -> Dict[str, Any]:
        out = {c.name: getattr(self, c.name) for c in self.__table__.columns}
        out["created_at"] = self.created_at.isoformat() if self.created_at else None
        return out

    def to_summary(self) -> Dict[str, Any]:
        full = self.to_dict()
        return {k: full[k] for k in self.SUMMARY_FIELDS}

    def to_inputs(self) -> ROIInputs:
        return ROIInputs.from_mapping(self.to_dict())


def create_scenario(name: str, inputs: ROIInputs, results: ROIResults) -> Scenario:
    """Insert a computed scenario and return the persisted row."""
    scenario = Scenario(
        scenario_name=name,
        **inputs.to_dict(),
        monthly_savings=results.monthly_savings,
        payback_months=results.payback_months,
        roi_percentage=results.roi_percentage,
    )
    db.session.add(scenario)
    db.session.commit()
    logger.info("Saved scenario %d (%r)", scenario.id, name)
    return scenario


def list_scenarios() -> List[Scenario]:
    """All scenarios, newest first."""
    return db.session.execute(
        db.select(Scenario).order_by(Scenario.id.desc())
    ).scalars().all()


def get_scenario(scenario_id: int) -> Optional[Scenario]:
    return db.session.get(Scenario, scenario_id)


def delete_scenario(scenario_id: int) -> bool:
    """Delete one scenario.  Returns False if it did not exist."""
    scenario = db.session.get(Scenario, scenario_id)
    if scenario is None:
        return False
    db.session.delete(scenario)
    db.session.commit()
    logger.info("Deleted scenario %d", scenario_id)
    return True
