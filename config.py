from dotenv import load_dotenv
import os

load_dotenv()


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///nutrition.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pool settings untuk menangani idle connection drops
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,  # Test connection sebelum digunakan
        'pool_recycle': 300,    # Recycle connections setiap 5 menit
    }

    # External food database
    FOOD_API_PROVIDER = os.getenv("FOOD_API_PROVIDER", "openfoodfacts")
    OFF_SEARCH_URL = os.getenv("OFF_SEARCH_URL", "https://world.openfoodfacts.org/cgi/search.pl")
    USDA_SEARCH_URL = os.getenv("USDA_SEARCH_URL", "https://api.nal.usda.gov/fdc/v1/foods/search")
    USDA_API_KEY = os.getenv("USDA_API_KEY") or os.getenv("FOOD_API_KEY") or "DEMO_KEY"
    FOOD_API_TIMEOUT = float(os.getenv("FOOD_API_TIMEOUT", "5"))
    FOOD_API_PAGE_SIZE = int(os.getenv("FOOD_API_PAGE_SIZE", "5"))

    DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "default")
    FOOD_LOG_DEFAULT_LIMIT = int(os.getenv("FOOD_LOG_DEFAULT_LIMIT", "50"))
    FOOD_LOG_MAX_LIMIT = int(os.getenv("FOOD_LOG_MAX_LIMIT", "100"))

    # Housekeeping: hapus semua log setiap hari (UTC)
    PURGE_LOGS_DAILY = _env_bool("PURGE_LOGS_DAILY", False)
    PURGE_HOUR_UTC = int(os.getenv("PURGE_HOUR_UTC", "0"))

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
