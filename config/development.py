import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

FIREBASE_CONFIG = {
    "credentials_path": os.getenv("FIREBASE_CREDENTIALS", "serviceAccountKey.json"),
    "project_id": os.getenv("FIREBASE_PROJECT_ID"),
    "storage_bucket": os.getenv("FIREBASE_STORAGE_BUCKET"),
    # Web API key for the browser sign-in form.
    "web_api_key": os.getenv("FIREBASE_WEB_API_KEY", ""),
    "auth_domain": os.getenv("FIREBASE_AUTH_DOMAIN", ""),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Minutes after the slot start a teacher check-in still counts as on time
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "10"))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))

# Create the admin account from ADMIN_EMAIL/ADMIN_PASSWORD on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
