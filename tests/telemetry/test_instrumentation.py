"""Telemetry instrumentation unit tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pydantic
import pytest

from seabattle.engine.instrumented_match import InstrumentedMatch
from seabattle.engine.snapshot import BattleState
from seabattle.telemetry import config as telemetry_config_module
from seabattle.telemetry import logger as logger_module
from seabattle.telemetry import metrics as metrics_module
from seabattle.telemetry import tracer as tracer_module
from seabattle.telemetry.config import TelemetryConfig

_ENV_VARS = [
    "SEABATTLE_ENABLE_TRACING",
    "SEABATTLE_ENABLE_METRICS",
    "SEABATTLE_ENABLE_LOGGING",
    "SEABATTLE_LOG_LEVEL",
    "OTEL_TRACES_ENABLED",
    "OTEL_METRICS_ENABLED",
    "OTEL_LOGS_ENABLED",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
    "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT",
    "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT",
    "OTEL_SERVICE_NAME",
    "OTEL_SERVICE_NAMESPACE",
    "OTEL_RESOURCE_ATTRIBUTES",
]


class DummySpan:
    def __init__(self, names: list[str], span_name: str) -> None:
        self._names = names
        self._names.append(span_name)
        self.attributes: dict[str, object] = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, key, value):
        self.attributes[key] = value


class DummyTracer:
    def __init__(self) -> None:
        self.span_names: list[str] = []

    def start_as_current_span(self, name: str):
        return DummySpan(self.span_names, name)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def reset_singletons() -> None:
    tracer_module._TRACER_PROVIDER = None
    metrics_module._METER = None
    metrics_module._METER_PROVIDER = None
    metrics_module._INSTRUMENTS = {}
    logger_module._LOGGERS.clear()


def test_init_tracing_and_metrics(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()

    provider_instance = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock(return_value=provider_instance))
    monkeypatch.setattr(tracer_module, "OTLPSpanExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())
    tracer = tracer_module.init_tracing(
        TelemetryConfig(enable_tracing=True, otlp_traces_endpoint="http://example")
    )
    assert tracer is provider_instance.get_tracer.return_value
    assert tracer_module._TRACER_PROVIDER is provider_instance
    tracer_module.get_tracer("seabattle.test")
    provider_instance.get_tracer.assert_called_with("seabattle.test")

    meter_provider = MagicMock()
    monkeypatch.setattr(metrics_module, "MeterProvider", MagicMock(return_value=meter_provider))
    monkeypatch.setattr(metrics_module, "OTLPMetricExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(metrics_module.otel_metrics, "set_meter_provider", MagicMock())
    metrics_module.init_metrics(
        TelemetryConfig(enable_metrics=True, otlp_metrics_endpoint="http://example")
    )
    assert metrics_module._METER is meter_provider.get_meter.return_value

    metrics_module.record_game_metric("seabattle_test_total", 2, {"player": "Player1"})
    counter = meter_provider.get_meter.return_value.create_counter.return_value
    counter.add.assert_called_once_with(2, attributes={"player": "Player1"})
    reset_singletons()


def test_get_logger_caches_per_name() -> None:
    reset_singletons()
    assert logger_module.get_logger("a") is logger_module.get_logger("a")
    assert logger_module.get_logger("a") is not logger_module.get_logger("b")


def test_init_logging_installs_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    installed: list[tuple[object, int]] = []
    monkeypatch.setattr(logger_module, "LoggerProvider", MagicMock())
    monkeypatch.setattr(logger_module, "LoggingHandler", MagicMock())
    monkeypatch.setattr(logger_module, "OTLPLogExporter", MagicMock())
    monkeypatch.setattr(logger_module, "BatchLogRecordProcessor", MagicMock())
    monkeypatch.setattr(logger_module, "set_logger_provider", MagicMock())
    monkeypatch.setattr(
        logger_module, "_install_root_handler", lambda handler, level: installed.append((handler, level))
    )

    config = TelemetryConfig(enable_logging=True, otlp_logs_endpoint="http://example", log_level="debug")
    logger = logger_module.init_logging(config)
    assert logger is logger_module.get_logger("seabattle")
    assert len(installed) == 1
    assert installed[0][1] == 10
    logger_module.set_logger_provider.assert_called_once()


def test_init_telemetry_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig())
    assert calls == []


def test_init_telemetry_respects_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(telemetry_config_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(telemetry_config_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(telemetry_config_module, "init_logging", lambda cfg: calls.append("lo"))

    config = TelemetryConfig(enable_tracing=True, enable_logging=True)
    telemetry_config_module.init_telemetry(config)
    assert calls == ["tr", "lo"]


def test_from_env_defaults(clean_env: pytest.MonkeyPatch) -> None:
    config = TelemetryConfig.from_env()
    assert config == TelemetryConfig()
    assert config.resource == {"service.name": "seabattle", "service.namespace": "game"}


def test_from_env_reads_variables(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SEABATTLE_ENABLE_METRICS", "yes")
    clean_env.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317/")
    clean_env.setenv("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT", "http://logs:4317")
    clean_env.setenv("OTEL_SERVICE_NAME", "arena")
    clean_env.setenv("OTEL_RESOURCE_ATTRIBUTES", "env=test, team = games,broken")
    clean_env.setenv("SEABATTLE_LOG_LEVEL", "warning")

    config = TelemetryConfig.from_env()
    assert config.enable_metrics is True
    assert config.enable_tracing is True
    assert config.enable_logging is True
    assert config.otlp_traces_endpoint == "http://collector:4317/v1/traces"
    assert config.otlp_logs_endpoint == "http://logs:4317"
    assert config.service_name == "arena"
    assert config.resource_attributes == {"env": "test", "team": "games"}
    assert config.log_level == "WARNING"


def test_from_env_overrides_win(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("OTEL_SERVICE_NAME", "arena")
    config = TelemetryConfig.from_env(service_name="override")
    assert config.service_name == "override"


def test_invalid_log_level() -> None:
    with pytest.raises(pydantic.ValidationError):
        TelemetryConfig(log_level="LOUD")


def test_load_telemetry_config_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    telemetry_config_module.load_telemetry_config.cache_clear()
    calls = {"count": 0}

    def fake_from_env(cls, **overrides):
        calls["count"] += 1
        return TelemetryConfig(enable_tracing=True)

    monkeypatch.setattr(TelemetryConfig, "from_env", classmethod(fake_from_env))

    first = telemetry_config_module.load_telemetry_config()
    second = telemetry_config_module.load_telemetry_config()
    assert first is second
    assert calls["count"] == 1
    telemetry_config_module.load_telemetry_config.cache_clear()


def test_instrumented_match_emits_spans(monkeypatch: pytest.MonkeyPatch) -> None:
    tracer = DummyTracer()
    metrics_calls: list[tuple[str, float, dict | None]] = []
    logger = MagicMock()

    monkeypatch.setattr("seabattle.engine.instrumented_match.get_tracer", lambda *_: tracer)
    monkeypatch.setattr("seabattle.engine.instrumented_match.get_logger", lambda *_: logger)
    monkeypatch.setattr(
        "seabattle.engine.instrumented_match.record_game_metric",
        lambda name, value, attrs=None: metrics_calls.append((name, value, attrs)),
    )

    match = InstrumentedMatch(seed=0)
    assert "seabattle.match.game" in tracer.span_names
    assert "seabattle.match.restart" in tracer.span_names

    match.randomize_ally()
    tracer.span_names.clear()
    metrics_calls.clear()
    for coord in match.board_for(match.enemy).coordinates():
        if match.battle.state is BattleState.GAME_OVER:
            break
        match.fire(coord)

    assert "seabattle.match.fire" in tracer.span_names
    assert "seabattle.match.game_complete" in tracer.span_names
    metric_names = {name for name, _, _ in metrics_calls}
    assert {
        "seabattle_shots_total",
        "seabattle_shots_by_result_total",
        "seabattle_ships_sunk_total",
        "seabattle_game_completed_total",
        "seabattle_game_duration_seconds",
    } <= metric_names
    completed = next(attrs for name, _, attrs in metrics_calls if name == "seabattle_game_completed_total")
    assert completed == {"winner": match.winner.value}


def test_instrumented_match_counts_rejected_shots(monkeypatch: pytest.MonkeyPatch) -> None:
    metrics_calls: list[tuple[str, float, dict | None]] = []
    monkeypatch.setattr("seabattle.engine.instrumented_match.get_tracer", lambda *_: DummyTracer())
    monkeypatch.setattr("seabattle.engine.instrumented_match.get_logger", lambda *_: MagicMock())
    monkeypatch.setattr(
        "seabattle.engine.instrumented_match.record_game_metric",
        lambda name, value, attrs=None: metrics_calls.append((name, value, attrs)),
    )

    match = InstrumentedMatch(seed=1)
    metrics_calls.clear()
    match.fire(match.board_for(match.enemy).coordinates()[0])
    assert metrics_calls == [
        (
            "seabattle_game_invalid_moves_total",
            1,
            {"player": "Player1", "reason": "GameNotInPlay"},
        )
    ]
