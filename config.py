from __future__ import annotations
import os
from pathlib import Path

# Start times of consecutive 50-minute slots per shift
SHIFT_SLOTS = {
    "morning":   ("07:10", "08:00", "08:50", "09:50", "10:40", "11:30"),
    "afternoon": ("13:00", "13:50", "14:40", "15:40", "16:30", "17:20"),
    "evening":   ("19:00", "19:50", "20:50", "21:40"),
}

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent
    # SQLite file in project directory
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'app.db'}")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SHIFT_SLOTS = SHIFT_SLOTS
    # roles whose requests skip the approval step
    PRIVILEGED_ROLES = ("admin",)
    # re-run the room check when an allocation is approved
    ALLOCATION_RECHECK_ON_APPROVE = False
    # free a room only when no other confirmed allocation still holds it
    ROOM_STATUS_RECOMPUTE = True

class DevConfig(BaseConfig):
    DEBUG = True
    SEED_DEMO_DATA = True

class TestConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SEED_DEMO_DATA = False

class ProdConfig(BaseConfig):
    DEBUG = False
    JSON_SORT_KEYS = False
    SEED_DEMO_DATA = False

config_map = {
    "dev": DevConfig,
    "test": TestConfig,
    "prod": ProdConfig,
    "default": DevConfig,
}
