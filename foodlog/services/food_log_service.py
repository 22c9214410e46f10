"""
Food Log Service

Handles food log operations including creation, retrieval and bulk deletion.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from foodlog.errors import StorageError, ValidationError
from foodlog.extensions import db
from foodlog.models.food_log import FoodLog, NUTRIENT_COLUMNS
from foodlog.services.normalizer import normalize, validate_quantity
from foodlog.services.resolver import NutrientResolver, ResolvedFood
from foodlog.utils.clock import utcnow

logger = logging.getLogger(__name__)

MAX_USER_ID_LENGTH = 64


def normalize_user_id(user_id: Any) -> str:
    """Return the stored form of ``user_id``; absent means the implicit user."""
    if user_id is None:
        return current_app.config["DEFAULT_USER_ID"]
    if isinstance(user_id, bool) or not isinstance(user_id, (str, int)):
        raise ValidationError("user_id must be a string or integer", fields=["user_id"])
    value = str(user_id).strip()
    if not value:
        return current_app.config["DEFAULT_USER_ID"]
    if len(value) > MAX_USER_ID_LENGTH:
        raise ValidationError("user_id is too long", fields=["user_id"])
    return value


def build_food_log(
    food_name: str,
    quantity: float,
    unit: str,
    resolver: NutrientResolver,
    user_id: Any = None,
) -> FoodLog:
    """
    Validate one food intake, look up its nutrition and return an unsaved FoodLog.

    Args:
        food_name: Free-text food name as typed by the user
        quantity: Positive amount in ``unit``
        unit: Free-text unit token ("g", "oz", "cup", ...)
        resolver: Nutrient resolver used for the per-100g lookup
        user_id: Optional user identifier

    Returns:
        A FoodLog not yet added to the session. Nutrient fields are all
        None when the lookup failed.

    Raises:
        ValidationError: Bad input, raised before any lookup
    """
    name = (food_name or "").strip()
    if not name:
        raise ValidationError("food_name is required", fields=["food_name"])
    quantity = validate_quantity(quantity)
    unit = (unit or "g").strip()
    owner = normalize_user_id(user_id)

    resolution = resolver.resolve(name)
    if isinstance(resolution, ResolvedFood):
        nutrition = normalize(resolution.nutrients, quantity, unit)
        display_name = resolution.name
    else:
        logger.warning("Logging %r without nutrition (%s)", name, resolution.reason)
        nutrition = {column: None for column in NUTRIENT_COLUMNS}
        display_name = name

    created_at = utcnow()
    return FoodLog(
        user_id=owner,
        food_name=display_name[:255],
        input_name=name[:255],
        quantity=quantity,
        unit=unit,
        logged_date=created_at.date(),
        created_at=created_at,
        **{column: nutrition.get(column) for column in NUTRIENT_COLUMNS},
    )


def save_food_logs(entries: List[FoodLog]) -> List[FoodLog]:
    """Store ``entries`` in one transaction; either all are saved or none."""
    try:
        db.session.add_all(entries)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Failed to store %d food log(s): %s", len(entries), e)
        raise StorageError("Failed to save food log") from e
    return entries


def create_food_log(
    food_name: str,
    quantity: float,
    unit: str,
    resolver: NutrientResolver,
    user_id: Any = None,
) -> FoodLog:
    """
    Log one food intake.

    Raises:
        ValidationError: Bad input, raised before any lookup
        StorageError: For database errors
    """
    entry = build_food_log(food_name, quantity, unit, resolver, user_id=user_id)
    save_food_logs([entry])
    return entry


def list_food_logs(day: Optional[date] = None, user_id: Optional[str] = None, limit: int = 50) -> List[FoodLog]:
    """Most recent food logs first, optionally for one day and/or user."""
    query = FoodLog.query
    if day is not None:
        query = query.filter(FoodLog.logged_date == day)
    if user_id:
        query = query.filter(FoodLog.user_id == user_id)
    try:
        return (
            query
            .order_by(desc(FoodLog.created_at), desc(FoodLog.id))
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("Failed to fetch food logs: %s", e)
        raise StorageError("Failed to fetch food logs") from e


def clear_food_logs() -> int:
    """Delete every food log. Returns the number of rows deleted."""
    try:
        deleted = FoodLog.query.delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Failed to clear food logs: %s", e)
        raise StorageError("Failed to clear food logs") from e
    logger.info("Cleared %d food logs", deleted)
    return deleted


def serialize_food_log(entry: FoodLog) -> Dict[str, Any]:
    payload = {
        "id": entry.id,
        "user_id": entry.user_id,
        "food_name": entry.food_name,
        "input_name": entry.input_name,
        "quantity": entry.quantity,
        "unit": entry.unit,
    }
    for column in NUTRIENT_COLUMNS:
        payload[column] = getattr(entry, column)
    payload["logged_date"] = entry.logged_date.isoformat() if entry.logged_date else None
    payload["created_at"] = entry.created_at.isoformat() if entry.created_at else None
    return payload
