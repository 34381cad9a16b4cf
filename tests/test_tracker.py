import pytest

from otelkit import tracker
from otelkit.namer import name_rpc


class _FakeSpan:
    def __init__(self, name, kwargs):
        self.name = name
        self.kwargs = kwargs

    def is_recording(self):
        return True


class _FakeTracer:
    def __init__(self):
        self.started = []

    def start_span(self, name, **kwargs):
        span = _FakeSpan(name, kwargs)
        self.started.append(span)
        return span


class _UpperNamer:
    def name(self, operation):
        return operation.upper()


@pytest.fixture(autouse=True)
def _reset():
    tracker.configure(None, None)
    yield
    tracker.configure(None, None)


def test_start_without_tracer_returns_noop_span():
    span = tracker.start("anything")
    assert span.is_recording() is False
    assert tracker.current_tracer() is None


def test_noop_span_works_as_context_manager():
    with tracker.start("anything") as span:
        span.set_attribute("k", "v")
    assert span.is_recording() is False


def test_start_uses_configured_tracer_and_default_namer():
    fake = _FakeTracer()
    tracker.configure(fake, None)
    operation = name_rpc("Greeter", "SayHello")
    span = tracker.start(operation)
    assert span.name == operation
    assert fake.started == [span]
    assert tracker.current_tracer() is fake


def test_start_applies_namer():
    fake = _FakeTracer()
    tracker.configure(fake, _UpperNamer())
    span = tracker.start("process")
    assert span.name == "PROCESS"


def test_start_passes_keyword_arguments():
    fake = _FakeTracer()
    tracker.configure(fake)
    span = tracker.start("op", kind="server", attributes={"a": 1})
    assert span.kwargs == {"kind": "server", "attributes": {"a": 1}}


def test_reconfigure_to_none_disables_tracing():
    fake = _FakeTracer()
    tracker.configure(fake)
    tracker.configure(None)
    span = tracker.start("op")
    assert span.is_recording() is False
    assert fake.started == []