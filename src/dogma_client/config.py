"""Configuration management for the Dogma client."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class WatchConfig(BaseModel):
    """Configuration for long-poll watch streams.

    Backoff defaults follow the server's reference client: the first
    transient failure waits 4 seconds, each further failure doubles the
    wait, and the wait never exceeds 64 seconds.
    """

    timeout: float = Field(
        default=60.0,
        description="Seconds the server may hold a watch request open (Prefer: wait=N)",
    )
    timeout_margin: float = Field(
        default=10.0,
        description="Extra seconds allowed on top of the server wait before the client gives up",
    )
    backoff_initial_delay: float = Field(
        default=4.0, description="Delay after the first transient failure in seconds"
    )
    backoff_multiplier: float = Field(
        default=2.0, description="Growth factor applied per consecutive failure"
    )
    backoff_max_delay: float = Field(
        default=64.0, description="Ceiling for the backoff delay in seconds"
    )
    jitter_rate: float = Field(
        default=0.2, description="Upper bound of random jitter as a fraction of the delay"
    )
    delay_on_success: float = Field(
        default=0.0,
        description="Pause before polling again after an update was produced",
    )

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("timeout_margin", "backoff_initial_delay", "delay_on_success")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("value must be non-negative")
        return v

    @field_validator("backoff_multiplier")
    @classmethod
    def validate_multiplier(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError("backoff_multiplier must be >= 1.0")
        return v

    @field_validator("jitter_rate")
    @classmethod
    def validate_jitter_rate(cls, v: float) -> float:
        if not 0.0 <= v < 1.0:
            raise ValueError("jitter_rate must be in [0.0, 1.0)")
        return v

    @model_validator(mode="after")
    def validate_backoff_bounds(self) -> "WatchConfig":
        if self.backoff_max_delay < self.backoff_initial_delay:
            raise ValueError("backoff_max_delay must be >= backoff_initial_delay")
        return self


class ClientConfig(BaseModel):
    """Connection settings for a Dogma server."""

    server_url: str = Field(..., description="Base URL of the server")
    token: Optional[str] = Field(
        default=None, description="Bearer token; requests are anonymous when unset"
    )
    request_timeout: float = Field(
        default=30.0, description="Timeout for non-watch requests in seconds"
    )
    watch: WatchConfig = Field(default_factory=WatchConfig)

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"server_url must be an http(s) URL: {v!r}")
        return v.rstrip("/")

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be positive")
        return v

    @classmethod
    def load(cls, config_path: Path) -> "ClientConfig":
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid JSON or fails validation
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")

        logger.debug(f"Loaded client configuration from {config_path}")
        return cls(**data)

    @classmethod
    def from_env(cls, prefix: str = "DOGMA_") -> "ClientConfig":
        """Build configuration from ``<prefix>SERVER_URL``, ``<prefix>TOKEN``
        and ``<prefix>REQUEST_TIMEOUT``."""
        server_url = os.environ.get(f"{prefix}SERVER_URL")
        if not server_url:
            raise ValueError(f"{prefix}SERVER_URL is not set")

        data: Dict[str, Any] = {
            "server_url": server_url,
            "token": os.environ.get(f"{prefix}TOKEN"),
        }
        request_timeout = os.environ.get(f"{prefix}REQUEST_TIMEOUT")
        if request_timeout:
            data["request_timeout"] = float(request_timeout)
        return cls(**data)
