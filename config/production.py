import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

FIREBASE_CONFIG = {
    # Empty path falls back to application default credentials.
    "credentials_path": os.getenv("FIREBASE_CREDENTIALS"),
    "project_id": os.getenv("FIREBASE_PROJECT_ID"),
    "storage_bucket": os.getenv("FIREBASE_STORAGE_BUCKET"),
    "web_api_key": os.getenv("FIREBASE_WEB_API_KEY", ""),
    "auth_domain": os.getenv("FIREBASE_AUTH_DOMAIN", ""),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "10"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))

AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
