from flask import current_app

from foodlog.extensions import db
from foodlog.utils.clock import utcnow
from foodlog.utils.http import ok


def home_index():
    return ok({
        "message": "Food log service is running",
    })


def health_check():
    """
    Report database and food API reachability independently.

    Always 200: a food API outage only degrades nutrition data.
    """
    database_ok = True
    try:
        # Ping the database
        db.session.execute(db.text("SELECT 1"))
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Database health check failed: %s", e)
        database_ok = False

    food_api_ok = current_app.extensions["nutrient_resolver"].ping()

    return ok({
        "status": "online" if database_ok else "degraded",
        "database": database_ok,
        "food_api": food_api_ok,
        "server_time": utcnow().isoformat(),
    })
