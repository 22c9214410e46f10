"""
Summary Service

Daily aggregation of food logs by calendar date.
"""

from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from foodlog.errors import StorageError
from foodlog.extensions import db
from foodlog.models.food_log import FoodLog, NUTRIENT_COLUMNS
from foodlog.services.food_log_service import serialize_food_log
from foodlog.services.normalizer import round_half_up
from foodlog.utils.clock import utc_today


def daily_summary(day: Optional[date] = None, user_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sum every nutrient over the food logs of one day.

    Entries without nutrition (failed lookups) count toward ``entry_count``
    but add nothing to the totals.

    Args:
        day: Calendar date to summarise (default: today, UTC)
        user_id: Restrict to one user when given

    Returns:
        Dictionary with per-nutrient totals, entry count and the entries,
        most recent first
    """
    day = day or utc_today()

    filters = [FoodLog.logged_date == day]
    if user_id:
        filters.append(FoodLog.user_id == user_id)

    sums = [
        func.coalesce(func.sum(getattr(FoodLog, column)), 0).label(column)
        for column in NUTRIENT_COLUMNS
    ]

    try:
        totals = db.session.query(*sums).filter(*filters).one()
        entries = (
            FoodLog.query
            .filter(*filters)
            .order_by(FoodLog.created_at.desc(), FoodLog.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise StorageError("Failed to build daily summary") from e

    summary: Dict[str, Any] = {"date": day.isoformat(), "user_id": user_id}
    for column in NUTRIENT_COLUMNS:
        summary[f"total_{column}"] = round_half_up(float(getattr(totals, column) or 0))
    summary["entry_count"] = len(entries)
    summary["entries"] = [serialize_food_log(entry) for entry in entries]
    return summary
