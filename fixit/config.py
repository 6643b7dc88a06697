import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Local development falls back to a SQLite file next to the project
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fixit.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")
# Web API key, required for password sign-in through the Identity Toolkit REST API
FIREBASE_API_KEY = os.getenv("FIREBASE_API_KEY")
FIREBASE_CERTS_URL = os.getenv(
    "FIREBASE_CERTS_URL",
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com",
)
IDENTITY_TOOLKIT_URL = os.getenv(
    "IDENTITY_TOOLKIT_URL", "https://identitytoolkit.googleapis.com/v1"
)

# Frontend base URL and CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", f"{FRONTEND_URL},http://localhost:3000").split(",")

# Marketplace settings
PLATFORM_FEE_RATE = os.getenv("PLATFORM_FEE_RATE", "0.05")  # kept as str for Decimal math
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))
BOOKINGS_PAGE_SIZE = int(os.getenv("BOOKINGS_PAGE_SIZE", "50"))

# Middleware toggles
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
REDIS_URL = os.getenv("REDIS_URL")
