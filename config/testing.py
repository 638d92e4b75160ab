import os

SECRET_KEY = "test-secret"

FIREBASE_CONFIG = {
    "credentials_path": os.getenv("FIREBASE_CREDENTIALS"),
    "project_id": os.getenv("FIREBASE_PROJECT_ID", "school-portal-test"),
    "storage_bucket": os.getenv("FIREBASE_STORAGE_BUCKET"),
    "web_api_key": "",
    "auth_domain": "",
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

LATE_GRACE_MINUTES = 10
SESSION_DAYS = 1

AUTO_SEED_DB = False
