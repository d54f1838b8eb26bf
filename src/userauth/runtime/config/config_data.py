"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class JWTConfig(BaseModel):
    """Access and refresh token signing configuration."""

    algorithm: str = Field(default="HS256", description="Signing algorithm")
    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["HS256", "HS384", "HS512"],
        description="JWT algorithms accepted when verifying tokens",
    )
    issuer: str = Field(
        default="userauth-api", description="Issuer name to use when generating tokens"
    )
    access_token_secret: str | None = Field(
        default=None, description="Secret for signing access tokens"
    )
    access_token_expires_in: int = Field(
        default=900, description="Access token lifetime in seconds"
    )
    refresh_token_secret: str | None = Field(
        default=None, description="Secret for signing refresh tokens"
    )
    refresh_token_expires_in: int = Field(
        default=10 * 24 * 3600, description="Refresh token lifetime in seconds"
    )
    clock_skew: int = Field(
        default=0, ge=0, description="Seconds a token stays valid past exp, and before nbf/iat"
    )


class PasswordConfig(BaseModel):
    """Password hashing configuration."""

    bcrypt_rounds: int = Field(
        default=10, ge=4, le=31, description="bcrypt work factor (log2 rounds)"
    )


class VerificationConfig(BaseModel):
    """Email/phone verification token configuration."""

    email_token_bytes: int = Field(
        default=20, ge=1, description="Random bytes in an email verification token"
    )
    phone_token_bytes: int = Field(
        default=6, ge=1, description="Random bytes in a phone verification code"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path (unset disables the file sink)")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    backend: Literal["sql", "memory"] = Field(
        default="sql", description="User store backend"
    )
    url: str = Field(
        default="sqlite:///./userauth.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    api_prefix: str = Field(default="/api/users", description="Mount point of the users API")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class SecurityConfig(BaseModel):
    """Cookie settings for the bearer artifacts."""

    access_cookie_name: str = Field(default="auth_token")
    refresh_cookie_name: str = Field(default="session_token")
    secure_cookies: bool = Field(
        default=True, description="Mark token cookies as Secure"
    )
    cookie_samesite: Literal["lax", "strict", "none"] = Field(
        default="lax", description="SameSite cookie attribute"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="Token signing configuration"
    )
    password: PasswordConfig = Field(
        default_factory=PasswordConfig, description="Password hashing configuration"
    )
    verification: VerificationConfig = Field(
        default_factory=VerificationConfig,
        description="Verification token configuration",
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Cookie configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
