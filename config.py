import os
from dotenv import load_dotenv

load_dotenv()

# Firebase
FIREBASE_CREDENTIALS = os.environ.get("FIREBASE_CREDENTIALS", "firebase.json")
FIREBASE_DATABASE_URL = os.environ.get("FIREBASE_DATABASE_URL", "")

# Tokens
SECRET_KEY = os.environ.get("SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days
RESET_TOKEN_EXPIRE_MINUTES = int(os.environ.get("RESET_TOKEN_EXPIRE_MINUTES", 60))

# Mail
SMTP_HOST = os.environ.get("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.environ.get("SMTP_PORT", 587))
SMTP_USERNAME = os.environ.get("SMTP_USERNAME", "")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
ACTION_URL = os.environ.get("ACTION_URL", "https://wegrowparenting.com")
PASSWORD_RESET_URL = os.environ.get("PASSWORD_RESET_URL", "https://wegrowparenting.com/reset-password")

# Feed and notifications
NOTIFICATION_TOPIC = os.environ.get("NOTIFICATION_TOPIC", "new-videos")
DEFAULT_PAGE_LIMIT = 4
MAX_PAGE_LIMIT = 100
PROFILE_IMAGE_COUNT = 10

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
