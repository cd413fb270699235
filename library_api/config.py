import os
from datetime import timedelta


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///library.db"
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-super-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.getenv("JWT_EXPIRES_MINUTES", "60")))

    # empty REDIS_URL turns the books listing cache off
    REDIS_URL = os.getenv("REDIS_URL", "")
    BOOKS_CACHE_TTL = int(os.getenv("BOOKS_CACHE_TTL", "60"))

    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:5173")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
