"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "job_board"

    # Signed tokens (organization email verification)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    verification_expire_minutes: int = 60

    # Outgoing mail (empty smtp_host = log instead of send)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    smtp_timeout: float = 30.0
    mail_sender_name: str = "HR Team"
    mail_from: Optional[str] = None

    # One-time passwords
    otp_expire_minutes: int = 10
    otp_length: int = 4

    # Uploaded files (candidate pictures, resumes, company logos)
    upload_dir: str = "uploads"
    max_upload_mb: int = 5

    # Links placed in outgoing emails
    api_base_url: str = "http://localhost:5000"
    frontend_url: str = "http://localhost:3000"

    # App
    debug: bool = True
    log_level: str = "INFO"

    @property
    def sender_address(self) -> str:
        """'From' header for outgoing mail."""
        email = self.mail_from or self.smtp_user or f"noreply@{self.smtp_host or 'localhost'}"
        return f'"{self.mail_sender_name}" <{email}>'

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
