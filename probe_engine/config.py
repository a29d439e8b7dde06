"""Process-wide settings, built once at startup and passed down by reference."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"

    mtr_binary: str = "mtr"
    ping_binary: str = "ping"
    route_cycles: int = Field(default=10, ge=1)
    ping_count: int = Field(default=10, ge=1)

    stderr_chunk_size: int = Field(default=1024, ge=1)
    line_limit: int = Field(default=64 * 1024, ge=1024)
    request_timeout: float = Field(default=60.0, gt=0)

    @classmethod
    def from_env(cls) -> Settings:
        """Read overrides from the environment (all optional).

        PROBE_HOST, PROBE_PORT, PROBE_LOG_LEVEL, PROBE_MTR_BIN,
        PROBE_PING_BIN, PROBE_ROUTE_CYCLES, PROBE_PING_COUNT,
        PROBE_STDERR_CHUNK, PROBE_LINE_LIMIT, PROBE_REQUEST_TIMEOUT
        """
        env = {
            "host": os.environ.get("PROBE_HOST"),
            "port": os.environ.get("PROBE_PORT"),
            "log_level": os.environ.get("PROBE_LOG_LEVEL"),
            "mtr_binary": os.environ.get("PROBE_MTR_BIN"),
            "ping_binary": os.environ.get("PROBE_PING_BIN"),
            "route_cycles": os.environ.get("PROBE_ROUTE_CYCLES"),
            "ping_count": os.environ.get("PROBE_PING_COUNT"),
            "stderr_chunk_size": os.environ.get("PROBE_STDERR_CHUNK"),
            "line_limit": os.environ.get("PROBE_LINE_LIMIT"),
            "request_timeout": os.environ.get("PROBE_REQUEST_TIMEOUT"),
        }
        return cls(**{k: v for k, v in env.items() if v})
