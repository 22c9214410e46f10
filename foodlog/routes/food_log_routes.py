from flask import Blueprint
from foodlog.controllers.food_log_controller import (
    create_food_log_handler,
    create_food_log_from_text_handler,
    list_food_log_handler,
    daily_summary_handler,
    clear_logs_handler,
)

food_log_bp = Blueprint("food_log", __name__, url_prefix="/api")


@food_log_bp.get("/food-log")
def list_food_log():
    return list_food_log_handler()


@food_log_bp.post("/food-log")
def create_food_log():
    return create_food_log_handler()


@food_log_bp.post("/food-log/text")
def create_food_log_from_text():
    return create_food_log_from_text_handler()


@food_log_bp.get("/daily-summary")
def daily_summary():
    return daily_summary_handler()


# Operator only
@food_log_bp.post("/clear-logs")
def clear_logs():
    return clear_logs_handler()
