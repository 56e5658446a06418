import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./architectures.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

# Cosmetic delay before the "saved" indicator returns to idle
SAVED_INDICATOR_SECONDS = float(os.getenv("SAVED_INDICATOR_SECONDS", "2.0"))

LAYOUT_START_X = float(os.getenv("LAYOUT_START_X", "100"))
LAYOUT_START_Y = float(os.getenv("LAYOUT_START_Y", "100"))
LAYOUT_HORIZONTAL_SPACING = float(os.getenv("LAYOUT_HORIZONTAL_SPACING", "400"))
LAYOUT_VERTICAL_SPACING = float(os.getenv("LAYOUT_VERTICAL_SPACING", "200"))

DEFAULT_DATABASE_NAME = os.getenv("DEFAULT_DATABASE_NAME", "PostgreSQL")
GRAPH_VERSION = os.getenv("GRAPH_VERSION", "1.0.0")

DB_CONNECT_RETRIES = int(os.getenv("DB_CONNECT_RETRIES", "5"))
DB_CONNECT_DELAY = float(os.getenv("DB_CONNECT_DELAY", "2"))
