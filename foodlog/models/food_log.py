from foodlog.extensions import db

NUTRIENT_COLUMNS = ("calories", "protein", "carbs", "fat", "fiber", "sugar", "sodium")


class FoodLog(db.Model):
    __tablename__ = "food_logs"
    __table_args__ = (
        db.Index("ix_food_logs_user_date", "user_id", "logged_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False)
    food_name = db.Column(db.String(255), nullable=False)
    input_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(32), nullable=False)

    # All set when the lookup succeeded, all NULL when it failed
    calories = db.Column(db.Float)
    protein = db.Column(db.Float)
    carbs = db.Column(db.Float)
    fat = db.Column(db.Float)
    fiber = db.Column(db.Float)
    sugar = db.Column(db.Float)
    sodium = db.Column(db.Float)  # mg

    logged_date = db.Column(db.Date, nullable=False, index=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)

    @property
    def has_nutrition(self) -> bool:
        return self.calories is not None
