import threading
from datetime import timedelta

import pytest

from otelkit.sim.cli import execute_continuous, execute_quick, load_scenario, main
from otelkit.sim.engine import Engine, EngineConfig
from otelkit.sim.settings import SimConfig

ENV_VARS = ("OTEL_EXPORTER_OTLP_ENDPOINT", "OTEL_EXPORTER_OTLP_INSECURE", "OTEL_SERVICE_NAME")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def fast_engine():
    return Engine(EngineConfig(endpoint="localhost:4317"), sleep=lambda _: None)


def roots(engine):
    return [span for span in engine.recorder.finished if span.parent is None]


class FailingEngine:
    def generate_trace(self, scenario):
        raise RuntimeError("boom")


def test_load_scenario_default_is_payment():
    assert load_scenario(SimConfig()).name == "payment"


def test_load_scenario_by_name():
    scenario = load_scenario(SimConfig(scenario="health-check"))
    assert scenario.root_span.name == "GET /health"


def test_load_scenario_unknown():
    with pytest.raises(ValueError, match="unknown scenario: nope"):
        load_scenario(SimConfig(scenario="nope"))


def test_load_scenario_from_file(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        "name: custom\nrootSpan:\n  name: root\n  service: svc\n  kind: SERVER\n"
        "  duration: 1ms\n",
        encoding="utf-8",
    )
    scenario = load_scenario(SimConfig(scenario="health-check", scenario_file=str(path)))
    assert scenario.name == "custom"
    assert scenario.root_span.name == "root"


def test_execute_quick_sends_all(capsys):
    engine = fast_engine()
    sent = execute_quick(SimConfig(scenario="health-check", count=3), engine)
    out = capsys.readouterr().out
    assert sent == 3
    assert len(roots(engine)) == 3
    assert "Sending 3 traces to localhost:4317 (scenario: health-check)" in out
    assert "Trace 3/3 sent" in out
    assert out.rstrip().endswith("Done!")


def test_execute_quick_interrupted(capsys):
    stop = threading.Event()
    stop.set()
    engine = fast_engine()
    sent = execute_quick(SimConfig(scenario="health-check", count=5), engine, stop)
    assert sent == 0
    assert roots(engine) == []
    assert "Interrupted after 0 traces" in capsys.readouterr().out


def test_execute_quick_failure_raises():
    with pytest.raises(RuntimeError, match="failed to generate trace 1: boom"):
        execute_quick(SimConfig(scenario="health-check", count=2), FailingEngine())


def test_execute_continuous_completes(capsys):
    engine = fast_engine()
    config = SimConfig(
        scenario="health-check", duration=timedelta(milliseconds=60), rate=200.0
    )
    sent = execute_continuous(config, engine)
    out = capsys.readouterr().out
    assert sent > 0
    assert len(roots(engine)) == sent
    assert "Running health-check scenario for" in out
    assert "at 200.0 traces/sec" in out
    assert f"Completed: sent {sent} traces" in out


def test_execute_continuous_interrupted(capsys):
    stop = threading.Event()
    stop.set()
    engine = fast_engine()
    config = SimConfig(scenario="health-check", duration=timedelta(seconds=5), rate=100.0)
    assert execute_continuous(config, engine, stop) == 0
    assert "Interrupted after 0 traces" in capsys.readouterr().out


def test_execute_continuous_failures_are_skipped(capsys):
    config = SimConfig(
        scenario="health-check", duration=timedelta(milliseconds=30), rate=200.0
    )
    assert execute_continuous(config, FailingEngine()) == 0
    captured = capsys.readouterr()
    assert "Warning: failed to generate trace: boom" in captured.err
    assert "Completed: sent 0 traces" in captured.out


def test_execute_continuous_rejects_zero_rate():
    config = SimConfig(scenario="health-check", rate=0.0)
    with pytest.raises(ValueError, match="rate"):
        execute_continuous(config, fast_engine())


def test_main_without_arguments(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().out


@pytest.mark.parametrize("flag", ["help", "-h", "--help"])
def test_main_help(flag, capsys):
    assert main([flag]) == 0
    assert "Modes:" in capsys.readouterr().out


def test_main_unknown_mode(capsys):
    assert main(["bogus"]) == 1
    captured = capsys.readouterr()
    assert "Unknown mode: bogus" in captured.err
    assert "Usage:" in captured.out


def test_main_list(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    for name in ("payment", "edge-iot", "ecommerce", "health-check"):
        assert name in out


def test_main_quick(capsys):
    assert main(["quick", "--scenario", "health-check", "--count", "2"]) == 0
    out = capsys.readouterr().out
    assert "Sending 2 traces to localhost:4317 (scenario: health-check)" in out
    assert "Trace 2/2 sent" in out


def test_main_quick_environment_overrides_flag(monkeypatch, capsys):
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "collector:4317")
    args = ["quick", "--scenario", "health-check", "--count", "1", "--endpoint", "other:1"]
    assert main(args) == 0
    assert "to collector:4317" in capsys.readouterr().out


def test_main_unknown_scenario_reports_error(capsys):
    assert main(["quick", "--scenario", "missing"]) == 0
    assert "Error: unknown scenario: missing" in capsys.readouterr().err


def test_main_run(capsys):
    args = ["run", "--scenario", "health-check", "--duration", "50ms", "--rate", "50"]
    assert main(args) == 0
    assert "Completed: sent" in capsys.readouterr().out


def test_main_bad_duration_exits():
    with pytest.raises(SystemExit) as info:
        main(["run", "--duration", "soon"])
    assert info.value.code == 2