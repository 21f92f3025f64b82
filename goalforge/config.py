import os
from dotenv import load_dotenv

load_dotenv()

# --- API Keys (comma-separated for rotation) ---
GEMINI_API_KEYS = [k.strip() for k in os.getenv("GEMINI_API_KEYS", "").split(",") if k.strip()]
GROQ_API_KEYS = [k.strip() for k in os.getenv("GROQ_API_KEYS", "").split(",") if k.strip()]

# --- AI ---
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
AI_CACHE_TTL = int(os.getenv("AI_CACHE_TTL", "0"))  # seconds, 0 = no cache

# --- JWT Configuration ---
JWT_SECRET = os.getenv("JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = 720  # 30 days

# --- Database ---
# Local SQLite by default; point at the hosted Postgres instance in production
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/goalforge.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# --- Tasks ---
DEFAULT_TASK_LIST_TITLE = os.getenv("DEFAULT_TASK_LIST_TITLE", "My Tasks")
