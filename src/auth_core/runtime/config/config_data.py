"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./identity_core.db",
        description="Database connection URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")


class JWTConfig(BaseModel):
    """Token issuance configuration."""

    secret: str | None = Field(
        default=None, description="Secret used to sign issued tokens"
    )
    issuer: str = Field(
        default="identity-core", description="Issuer name to use when generating tokens"
    )
    audiences: list[str] = Field(
        default_factory=lambda: ["api://identity-core"],
        description="Audiences written into issued tokens",
    )
    algorithm: str = Field(default="HS256", description="Signing algorithm")
    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["HS256", "HS384", "HS512"],
        description="Algorithms the generator is allowed to sign with",
    )
    access_token_ttl_seconds: int = Field(
        default=3600, description="Access token lifetime in seconds"
    )
    refresh_token_ttl_seconds: int = Field(
        default=7 * 24 * 3600, description="Refresh token lifetime in seconds"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class RetryPolicyConfig(BaseModel):
    """Default retry policy for outbound requests."""

    enabled: bool = Field(default=False, description="Retry failed requests")
    max_retries: int = Field(
        default=3, description="Additional attempts after the first one"
    )
    retry_delay_ms: int = Field(
        default=1000, description="Base backoff delay in milliseconds"
    )
    retryable_status_codes: list[int] = Field(
        default_factory=lambda: [408, 429, 500, 502, 503, 504],
        description="HTTP statuses that may be retried",
    )
    retryable_errors: list[str] = Field(
        default_factory=lambda: ["ECONNRESET", "ETIMEDOUT", "ENOTFOUND", "ECONNREFUSED"],
        description="Transport error codes that may be retried",
    )


class RequestClientConfig(BaseModel):
    """Outbound HTTP client configuration."""

    timeout_seconds: float = Field(default=30.0, description="Per-call timeout")
    retry: RetryPolicyConfig = Field(
        default_factory=RetryPolicyConfig, description="Default retry policy"
    )


class PremblyConfig(BaseModel):
    """Prembly identity verification backend configuration."""

    base_url: str = Field(
        default="https://api.prembly.com", description="Prembly API base URL"
    )
    api_key: str | None = Field(default=None, description="Prembly API key")
    national_id_path: str = Field(
        default="/verification/vnin-basic", description="National ID lookup path"
    )
    rc_number_path: str = Field(
        default="/verification/cac", description="Company registry lookup path"
    )
    retry: RetryPolicyConfig = Field(
        default_factory=lambda: RetryPolicyConfig(enabled=True),
        description="Retry policy for verification calls",
    )


class VerificationConfig(BaseModel):
    """External ID verification configuration."""

    provider: Literal["stub", "prembly"] = Field(
        default="stub", description="Verification backend to use"
    )
    stub_latency_seconds: float = Field(
        default=0.5, description="Artificial latency of the stub provider"
    )
    rc_number_pattern: str = Field(
        default=r"^(?:RC-)?\d{6,7}$",
        description="Accepted registration number format",
    )
    cross_check_company: bool = Field(
        default=True,
        description="Compare registry name and address against the company profile",
    )
    match_national_id_name: bool = Field(
        default=False,
        description="Compare the national ID holder's name against the profile",
    )
    prembly: PremblyConfig = Field(
        default_factory=PremblyConfig, description="Prembly backend configuration"
    )


class OtpConfig(BaseModel):
    """One-time password configuration."""

    length: int = Field(default=6, description="Number of digits in a code")
    ttl_minutes: int = Field(default=10, description="Code lifetime in minutes")


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="Token issuance configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    request_client: RequestClientConfig = Field(
        default_factory=RequestClientConfig, description="Outbound HTTP configuration"
    )
    verification: VerificationConfig = Field(
        default_factory=VerificationConfig, description="ID verification configuration"
    )
    otp: OtpConfig = Field(default_factory=OtpConfig, description="OTP configuration")
