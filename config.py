import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv() # Load variables from the .env file


def _env_int(name, default):
    value = os.getenv(name)
    return int(value) if value else default


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me-in-production-cvchat-secret')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', SECRET_KEY)
    JWT_TOKEN_LOCATION = ["headers"]

    DB_HOST = os.getenv('DB_HOST', 'localhost')
    DB_USER = os.getenv('DB_USER', 'root')
    DB_PASSWORD = os.getenv('DB_PASSWORD')
    DB_NAME = os.getenv('DB_NAME', 'cvchat')

    # Build MySQL connection string (using PyMySQL driver) unless DATABASE_URL overrides it
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or (
        f"mysql+pymysql://{DB_USER}@{DB_HOST}/{DB_NAME}"
        if not DB_PASSWORD else
        f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}/{DB_NAME}"
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False  # disables overhead warning

    # Language model
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
    PARSE_TIMEOUT_SECONDS = _env_int('PARSE_TIMEOUT_SECONDS', 25)
    CHAT_TIMEOUT_SECONDS = _env_int('CHAT_TIMEOUT_SECONDS', 20)

    # Upload limits
    MAX_CONTENT_LENGTH = 50_000_000
    MAX_CV_BYTES = 20_000_000
    MAX_CERTIFICATE_BYTES = 15_000_000
    MAX_CERTIFICATES = 20
    MAX_REFERENCES = 20
    MAX_IMAGE_BYTES = 2_000_000
    MAX_ADDITIONAL_TEXT = 20_000
    MIN_READABLE_CHARS = _env_int('MIN_READABLE_CHARS', 100)
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', 'user_uploads')

    # Chat / profile limits
    MAX_QUESTION_CHARS = 4000
    MAX_SUMMARY_CHARS = 2000

    # Sessions
    SESSION_TTL_DAYS = _env_int('SESSION_TTL_DAYS', 30)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=SESSION_TTL_DAYS)

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')
    RATE_LIMIT_ENABLED = _env_bool('RATE_LIMIT_ENABLED', True)
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
