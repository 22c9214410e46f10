"""
Food Log Controller Module

Handles food log endpoints including:
- Logging a food with nutrition lookup
- Logging foods from free text
- Listing recent logs
- Daily nutrition summary
- Clearing all logs
"""

from flask import current_app

from foodlog.errors import ValidationError
from foodlog.schemas.food_log_schema import (
    CreateFoodLogSchema,
    DailySummaryQuerySchema,
    ListFoodLogQuerySchema,
    ParseFoodTextSchema,
)
from foodlog.services.food_log_service import (
    build_food_log,
    clear_food_logs,
    create_food_log,
    list_food_logs,
    save_food_logs,
    serialize_food_log,
)
from foodlog.services.summary_service import daily_summary
from foodlog.utils.clock import utcnow
from foodlog.utils.http import ok, error, json_body, query_args, validate_schema


def _resolver():
    return current_app.extensions["nutrient_resolver"]


def _text_parser():
    return current_app.extensions["food_text_parser"]


def _validation_error(errors):
    return error(
        "VALIDATION_ERROR",
        "Invalid request data",
        400,
        fields=sorted(errors.keys()),
        details=errors,
    )


def create_food_log_handler():
    """
    Log a food and its computed nutrition.

    Body Parameters:
        - food_name (required): Free-text food name
        - quantity (required): Positive number
        - unit (optional): Unit token (default: "g")
        - user_id (optional): User identifier
    """
    data, errors = validate_schema(CreateFoodLogSchema, json_body())
    if errors:
        return _validation_error(errors)

    entry = create_food_log(
        food_name=data["food_name"],
        quantity=data["quantity"],
        unit=data["unit"],
        resolver=_resolver(),
        user_id=data.get("user_id"),
    )

    payload = serialize_food_log(entry)
    payload["resolved"] = entry.has_nutrition
    return ok(payload, 201)


def create_food_log_from_text_handler():
    """
    Parse free text into foods and log them in one transaction.

    Body Parameters:
        - text (required): e.g. "2 cups rice and 120g chicken"
        - user_id (optional): User identifier
    """
    data, errors = validate_schema(ParseFoodTextSchema, json_body())
    if errors:
        return _validation_error(errors)

    items = _text_parser().parse(data["text"])
    if not items:
        raise ValidationError("No foods found in text", fields=["text"])

    entries = save_food_logs([
        build_food_log(
            food_name=item.food_name,
            quantity=item.quantity,
            unit=item.unit,
            resolver=_resolver(),
            user_id=data.get("user_id"),
        )
        for item in items
    ])

    payloads = []
    for entry in entries:
        payload = serialize_food_log(entry)
        payload["resolved"] = entry.has_nutrition
        payloads.append(payload)

    current_app.logger.info("Logged %d foods from text", len(payloads))
    return ok({"items": payloads, "count": len(payloads)}, 201)


def list_food_log_handler():
    """
    List recent food logs, most recent first.

    Query Parameters:
        - date: Only logs of this day (YYYY-MM-DD)
        - user_id: Only logs of this user
        - limit: Maximum number of logs (default: 50)
    """
    query, errors = validate_schema(ListFoodLogQuerySchema, query_args())
    if errors:
        return _validation_error(errors)

    max_limit = current_app.config["FOOD_LOG_MAX_LIMIT"]
    limit = min(query["limit"] or current_app.config["FOOD_LOG_DEFAULT_LIMIT"], max_limit)

    entries = list_food_logs(day=query["date"], user_id=query["user_id"], limit=limit)
    items = [serialize_food_log(entry) for entry in entries]
    return ok({"items": items, "count": len(items)})


def daily_summary_handler():
    """
    Nutrition totals for one day.

    Query Parameters:
        - date: Day to summarise (YYYY-MM-DD, default: today UTC)
        - user_id: Only logs of this user
    """
    query, errors = validate_schema(DailySummaryQuerySchema, query_args())
    if errors:
        return _validation_error(errors)

    return ok(daily_summary(day=query["date"], user_id=query["user_id"]))


def clear_logs_handler():
    current_app.logger.info("Manual clear-logs request received")
    deleted = clear_food_logs()
    return ok({
        "rows_deleted": deleted,
        "cleared_at": utcnow().isoformat(),
    })
