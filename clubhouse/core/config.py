"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "Clubhouse"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Database
    DATABASE_URL: str = "sqlite:///./clubhouse.db"

    # Auth
    JWT_SECRET: str = "dev-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 60 * 24

    # Admin Seed
    ADMIN_EMAIL: str = "admin@clubhouse.local"
    ADMIN_PASSWORD: str = "changeme123"
    ADMIN_NAME: str = "Administrator"

    # Posts
    POST_PAGE_SIZE_DEFAULT: int = 10
    POST_PAGE_SIZE_MAX: int = 50

    # Features
    FEATURE_UNIFIED_POST_OWNERSHIP: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
