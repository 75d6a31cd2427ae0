"""Telemetry configuration helpers."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from .logger import init_logging
from .metrics import init_metrics
from .tracer import init_tracing

_TRUTHY = {"1", "true", "yes", "on"}


class TelemetryConfig(BaseModel):
    """Runtime configuration for telemetry exporters."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "seabattle"
    service_namespace: str = "game"
    log_level: str = "INFO"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @property
    def resource(self) -> dict[str, str]:
        """Resource attributes shared by every exporter."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`SEABATTLE_*` + `OTEL_*`)."""

        data: Dict[str, Any] = {}

        for field, env_names in {
            "enable_tracing": ("SEABATTLE_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
            "enable_metrics": ("SEABATTLE_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
            "enable_logging": ("SEABATTLE_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
        }.items():
            for name in env_names:
                value = os.getenv(name)
                if value is not None:
                    data[field] = value.strip().lower() in _TRUTHY
                    break

        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        for field, signal in (
            ("otlp_traces_endpoint", "TRACES"),
            ("otlp_metrics_endpoint", "METRICS"),
            ("otlp_logs_endpoint", "LOGS"),
        ):
            endpoint = os.getenv(f"OTEL_EXPORTER_OTLP_{signal}_ENDPOINT")
            if not endpoint and base_endpoint:
                endpoint = f"{base_endpoint.rstrip('/')}/v1/{signal.lower()}"
            if endpoint:
                data[field] = endpoint

        if os.getenv("OTEL_SERVICE_NAME"):
            data["service_name"] = os.environ["OTEL_SERVICE_NAME"]
        if os.getenv("OTEL_SERVICE_NAMESPACE"):
            data["service_namespace"] = os.environ["OTEL_SERVICE_NAMESPACE"]
        if os.getenv("SEABATTLE_LOG_LEVEL"):
            data["log_level"] = os.environ["SEABATTLE_LOG_LEVEL"]

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            attrs: dict[str, str] = {}
            for part in resource_env.split(","):
                if "=" not in part:
                    continue
                key, value = part.split("=", 1)
                attrs[key.strip()] = value.strip()
            data["resource_attributes"] = attrs

        data.update(overrides)

        # Configured endpoints switch their exporter on.
        if data.get("otlp_traces_endpoint"):
            data["enable_tracing"] = True
        if data.get("otlp_metrics_endpoint"):
            data["enable_metrics"] = True
        if data.get("otlp_logs_endpoint"):
            data["enable_logging"] = True

        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise only the telemetry subsystems the config enables."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
