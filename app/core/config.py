from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = "sqlite:///./app.db"
    DB_BUSY_TIMEOUT_SECONDS: float = 5.0
    DB_ECHO: bool = False
    PROJECT_NAME: str = "Quiz Responder Backend"

    # Organizer (admin) tokens
    SECRET_KEY: str = "supersecret"
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Responder tokens use their own key and a much shorter lifetime
    RESPONDER_SECRET_KEY: str = "responder-supersecret"
    RESPONDER_TOKEN_EXPIRE_MINUTES: int = 120

    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "quiz-app-backend"

    # Credential issuance
    CREDENTIAL_DEFAULT_EXPIRY_HOURS: int = 24
    CREDENTIAL_PASSWORD_LENGTH: int = 12
    BCRYPT_ROUNDS: int = 12

    # Bootstrap organizer account, created on startup when both are set
    ADMIN_USERNAME: str = ""
    ADMIN_PASSWORD: str = ""

    REQUEST_TIMEOUT_SECONDS: float = 30.0

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
