from datetime import timedelta

import pytest

from otelkit.sim.scenario import (
    LogTemplate,
    Scenario,
    Service,
    SpanKind,
    SpanTemplate,
    db_attrs,
    http_client_attrs,
    http_server_attrs,
    messaging_attrs,
    rpc_attrs,
)


def test_http_server_attrs():
    attrs = http_server_attrs("POST", "/api/users", "/api/users", 201)
    assert len(attrs) == 4
    assert attrs["http.request.method"] == "POST"
    assert attrs["http.route"] == "/api/users"
    assert attrs["url.path"] == "/api/users"
    assert attrs["http.response.status_code"] == 201


def test_http_client_attrs():
    attrs = http_client_attrs("GET", "https://api.example.com/users", 200)
    assert len(attrs) == 3
    assert attrs["http.request.method"] == "GET"
    assert attrs["url.full"] == "https://api.example.com/users"
    assert attrs["http.response.status_code"] == 200


def test_rpc_attrs():
    attrs = rpc_attrs("grpc", "UserService", "GetUser")
    assert attrs == {
        "rpc.system": "grpc",
        "rpc.service": "UserService",
        "rpc.method": "GetUser",
    }


def test_db_attrs():
    attrs = db_attrs("postgresql", "users", "SELECT * FROM users")
    assert attrs == {
        "db.system": "postgresql",
        "db.namespace": "users",
        "db.query.text": "SELECT * FROM users",
    }


def test_messaging_attrs():
    attrs = messaging_attrs("kafka", "orders", "publish")
    assert attrs == {
        "messaging.system": "kafka",
        "messaging.destination.name": "orders",
        "messaging.operation.name": "publish",
    }


@pytest.mark.parametrize(
    "text, kind",
    [
        ("SERVER", SpanKind.SERVER),
        ("CLIENT", SpanKind.CLIENT),
        ("PRODUCER", SpanKind.PRODUCER),
        ("CONSUMER", SpanKind.CONSUMER),
        ("INTERNAL", SpanKind.INTERNAL),
    ],
)
def test_span_kind_from_text(text, kind):
    assert SpanKind(text) is kind
    assert str(kind) == text


def test_span_kind_rejects_unknown():
    with pytest.raises(ValueError):
        SpanKind("UNKNOWN")


def test_span_template_defaults():
    span = SpanTemplate(name="test-span")
    assert span.kind is SpanKind.INTERNAL
    assert span.duration == timedelta(0)
    assert span.children == []
    assert span.logs == []
    assert span.error_rate == 0.0


def test_span_templates_do_not_share_children():
    first = SpanTemplate(name="a")
    second = SpanTemplate(name="b")
    first.children.append(SpanTemplate(name="child"))
    assert second.children == []


def test_scenario_construction():
    scenario = Scenario(
        name="test-custom",
        description="Test custom scenario",
        services=[Service(name="test-service")],
        root_span=SpanTemplate(
            name="test-span",
            service="test-service",
            kind=SpanKind.SERVER,
            duration=timedelta(milliseconds=10),
            logs=[LogTemplate(level="INFO", message="hello")],
        ),
    )
    assert scenario.services[0].attributes == {}
    assert scenario.root_span.duration == timedelta(milliseconds=10)
    assert scenario.root_span.logs[0].delay == timedelta(0)
    assert scenario.root_span.logs[0].message == "hello"