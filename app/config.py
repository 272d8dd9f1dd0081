"""
Application Configuration
Load settings from environment variables
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Database Configuration
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", 3306))
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "gym_db")

# Security Configuration
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", 24))

# Application Settings
APP_NAME = os.getenv("APP_NAME", "Gym Operations API")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Role IDs
SUPERADMIN_ROLE_ID = int(os.getenv("SUPERADMIN_ROLE_ID", 1))
HOUSEKEEPING_ROLE_ID = int(os.getenv("HOUSEKEEPING_ROLE_ID", 8))
TRAINER_ROLE_IDS = tuple(
    int(r) for r in os.getenv("TRAINER_ROLE_IDS", "5,6").split(",") if r.strip()
)
