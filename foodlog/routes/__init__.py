from .home_routes import home_bp
from .food_log_routes import food_log_bp


def register_routes(app):
    app.register_blueprint(home_bp)
    app.register_blueprint(food_log_bp)
