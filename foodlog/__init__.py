import atexit
import logging

import click
from flask import Flask
from werkzeug.exceptions import HTTPException

from foodlog.errors import FoodLogError, NotFoundError, StorageError
from foodlog.extensions import db, cors, migrate
from foodlog.routes import register_routes
from foodlog.services.food_log_service import clear_food_logs
from foodlog.services.housekeeping import PurgeScheduler
from foodlog.services.resolver import build_resolver
from foodlog.services.text_parser import RegexFoodParser
from foodlog.utils.http import error


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object("config.Config")
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("foodlog").setLevel(app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Initialize database
    db.init_app(app)

    # Initialize Flask-Migrate
    migrate.init_app(app, db)

    # CORS Configuration
    cors.init_app(app,
                  origins=app.config["CORS_ORIGINS"],
                  allow_headers=["Content-Type"],
                  methods=["GET", "POST", "OPTIONS"])

    # External collaborators owned by the app
    resolver = build_resolver(app.config)
    app.extensions["nutrient_resolver"] = resolver
    app.extensions["food_text_parser"] = RegexFoodParser()
    atexit.register(resolver.close)

    register_routes(app)
    register_error_handlers(app)
    register_commands(app)

    if app.config["PURGE_LOGS_DAILY"] and not app.config.get("TESTING"):
        scheduler = PurgeScheduler(app, hour_utc=app.config["PURGE_HOUR_UTC"])
        app.extensions["purge_scheduler"] = scheduler
        scheduler.start()
        atexit.register(scheduler.stop)

    return app


def register_error_handlers(app):
    @app.errorhandler(FoodLogError)
    def handle_food_log_error(e):
        if isinstance(e, StorageError):
            # Details stay in the log
            return error(e.code, "Storage operation failed", e.status)
        return error(e.code, e.message, e.status, **e.extra)

    @app.errorhandler(404)
    def handle_not_found(e):
        return error(NotFoundError.code, "Route not found", NotFoundError.status)

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return error("METHOD_NOT_ALLOWED", "Method not allowed", 405)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return error(e.name.upper().replace(" ", "_"), e.description, e.code)
        app.logger.exception("Unhandled error")
        return error("INTERNAL_ERROR", "An unexpected error occurred", 500)


def register_commands(app):
    @app.cli.command("clear-logs")
    def clear_logs_command():
        """Delete all food logs."""
        deleted = clear_food_logs()
        click.echo(f"Deleted {deleted} food logs")

    @app.cli.command("init-db")
    def init_db_command():
        """Create tables without running migrations."""
        db.create_all()
        click.echo("Database tables created")
