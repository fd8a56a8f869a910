import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    # Alerts
    ALERT_THRESHOLD = float(os.getenv("FLEET_ALERT_THRESHOLD", "50"))
    DEFAULT_USAGE_RATE = float(os.getenv("FLEET_DEFAULT_USAGE_RATE", "4"))
    DUE_SOON_HOURS = float(os.getenv("FLEET_DUE_SOON_HOURS", "50"))

    # Warehouse
    LOW_STOCK_THRESHOLD = float(os.getenv("FLEET_LOW_STOCK_THRESHOLD", "5"))
    # When true, maintenance may draw stock below zero (logged as a warning)
    ALLOW_NEGATIVE_STOCK = _flag("FLEET_ALLOW_NEGATIVE_STOCK")

    # Storage
    DATA_DIR = os.getenv("FLEET_DATA_DIR", "data")
    FARM_KEY = os.getenv("FLEET_FARM_KEY", "farm")

    # Logging
    LOG_LEVEL = os.getenv("FLEET_LOG_LEVEL", "INFO")
