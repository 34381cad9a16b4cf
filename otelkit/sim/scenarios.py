"""Built-in simulation scenarios and the scenario registry."""

from __future__ import annotations

from datetime import timedelta

from otelkit.sim.scenario import LogTemplate, Scenario, Service, SpanKind, SpanTemplate

__all__ = [
    "REGISTRY",
    "payment_scenario",
    "edge_iot_scenario",
    "ecommerce_scenario",
    "health_check_scenario",
    "register",
    "get",
    "list_scenarios",
]


def _ms(value: int) -> timedelta:
    return timedelta(milliseconds=value)


def payment_scenario() -> Scenario:
    """Online payment flow with fraud detection and an external processor."""
    return Scenario(
        name="payment",
        description="Online payment system with fraud detection and external payment processor",
        services=[
            Service("payment-gateway"),
            Service("payment-service"),
            Service("fraud-detection"),
            Service("ml-service"),
            Service("payment-processor"),
            Service("notification-service"),
        ],
        root_span=SpanTemplate(
            name="POST /api/v1/checkout",
            service="payment-gateway",
            kind=SpanKind.SERVER,
            duration=_ms(180),
            attributes={
                "http.request.method": "POST",
                "http.route": "/api/v1/checkout",
                "url.path": "/api/v1/checkout",
                "http.response.status_code": "200",
            },
            children=[
                SpanTemplate(
                    name="ProcessPayment",
                    service="payment-service",
                    kind=SpanKind.INTERNAL,
                    duration=_ms(150),
                    attributes={"payment.amount": "99.99", "payment.currency": "USD"},
                    logs=[
                        LogTemplate(
                            level="INFO",
                            message="Processing payment request",
                            delay=_ms(1),
                        )
                    ],
                    children=[
                        SpanTemplate(
                            name="AnalyzeTransaction",
                            service="fraud-detection",
                            kind=SpanKind.CLIENT,
                            duration=_ms(45),
                            attributes={
                                "rpc.system": "grpc",
                                "rpc.service": "FraudDetection",
                                "rpc.method": "AnalyzeTransaction",
                            },
                            children=[
                                SpanTemplate(
                                    name="Predict",
                                    service="ml-service",
                                    kind=SpanKind.CLIENT,
                                    duration=_ms(25),
                                    attributes={
                                        "rpc.system": "grpc",
                                        "rpc.service": "MLService",
                                        "rpc.method": "Predict",
                                        "ml.model": "fraud-detector-v2",
                                    },
                                    logs=[
                                        LogTemplate(
                                            level="DEBUG",
                                            message="ML prediction completed",
                                            attributes={"ml.score": "0.12"},
                                        )
                                    ],
                                )
                            ],
                        ),
                        SpanTemplate(
                            name="ChargeCard",
                            service="payment-processor",
                            kind=SpanKind.INTERNAL,
                            duration=_ms(80),
                            error_rate=0.05,
                            error_status="payment declined",
                            children=[
                                SpanTemplate(
                                    name="POST /v2/charges",
                                    service="payment-processor",
                                    kind=SpanKind.CLIENT,
                                    duration=_ms(65),
                                    attributes={
                                        "http.request.method": "POST",
                                        "url.full": "https://api.stripe.com/v2/charges",
                                        "http.response.status_code": "200",
                                    },
                                )
                            ],
                        ),
                    ],
                ),
                SpanTemplate(
                    name="SendConfirmation",
                    service="notification-service",
                    kind=SpanKind.PRODUCER,
                    duration=_ms(15),
                    attributes={
                        "messaging.system": "kafka",
                        "messaging.destination.name": "notifications",
                        "messaging.operation.name": "publish",
                    },
                    logs=[LogTemplate(level="INFO", message="Confirmation email queued")],
                ),
            ],
        ),
    )


def edge_iot_scenario() -> Scenario:
    """Edge device telemetry ingestion into a time-series store and rule engine."""
    return Scenario(
        name="edge-iot",
        description="Edge device telemetry processing with time-series database and rule engine",
        services=[
            Service("device-gateway"),
            Service("device-registry"),
            Service("telemetry-processor"),
            Service("rule-engine"),
        ],
        root_span=SpanTemplate(
            name="device/+/telemetry",
            service="device-gateway",
            kind=SpanKind.CONSUMER,
            duration=_ms(35),
            attributes={
                "messaging.system": "mqtt",
                "messaging.destination.name": "device/+/telemetry",
                "messaging.operation.name": "receive",
            },
            logs=[
                LogTemplate(
                    level="DEBUG",
                    message="Received telemetry batch",
                    attributes={"batch.size": "10"},
                )
            ],
            children=[
                SpanTemplate(
                    name="ValidateDevice",
                    service="device-registry",
                    kind=SpanKind.CLIENT,
                    duration=_ms(8),
                    attributes={
                        "rpc.system": "grpc",
                        "rpc.service": "DeviceRegistry",
                        "rpc.method": "ValidateDevice",
                    },
                    children=[
                        SpanTemplate(
                            name="GET device:123",
                            service="device-registry",
                            kind=SpanKind.CLIENT,
                            duration=_ms(2),
                            attributes={
                                "db.system": "redis",
                                "db.namespace": "devices",
                                "db.query.text": "GET device:123",
                            },
                        )
                    ],
                ),
                SpanTemplate(
                    name="ProcessBatch",
                    service="telemetry-processor",
                    kind=SpanKind.INTERNAL,
                    duration=_ms(20),
                    logs=[LogTemplate(level="INFO", message="Processing telemetry batch")],
                    children=[
                        SpanTemplate(
                            name="INSERT metrics",
                            service="telemetry-processor",
                            kind=SpanKind.CLIENT,
                            duration=_ms(12),
                            attributes={
                                "db.system": "timescaledb",
                                "db.namespace": "telemetry",
                                "db.query.text": "INSERT INTO metrics ...",
                            },
                        ),
                        SpanTemplate(
                            name="EvaluateAlerts",
                            service="rule-engine",
                            kind=SpanKind.CLIENT,
                            duration=_ms(5),
                            attributes={
                                "rpc.system": "grpc",
                                "rpc.service": "RuleEngine",
                                "rpc.method": "EvaluateAlerts",
                            },
                            logs=[
                                LogTemplate(
                                    level="DEBUG",
                                    message="Evaluated 3 rules, 0 alerts triggered",
                                )
                            ],
                        ),
                    ],
                ),
            ],
        ),
    )


def ecommerce_scenario() -> Scenario:
    """Order creation with inventory reservation, pricing and event publishing."""
    return Scenario(
        name="ecommerce",
        description="E-commerce order creation with inventory reservation and event publishing",
        services=[
            Service("api-gateway"),
            Service("order-service"),
            Service("inventory-service"),
            Service("pricing-service"),
        ],
        root_span=SpanTemplate(
            name="POST /orders",
            service="api-gateway",
            kind=SpanKind.SERVER,
            duration=_ms(120),
            attributes={
                "http.request.method": "POST",
                "http.route": "/orders",
                "url.path": "/orders",
                "http.response.status_code": "201",
            },
            logs=[LogTemplate(level="INFO", message="Order creation request received")],
            children=[
                SpanTemplate(
                    name="CreateOrder",
                    service="order-service",
                    kind=SpanKind.INTERNAL,
                    duration=_ms(100),
                    attributes={"order.items_count": "3"},
                    children=[
                        SpanTemplate(
                            name="ReserveStock",
                            service="inventory-service",
                            kind=SpanKind.CLIENT,
                            duration=_ms(25),
                            attributes={
                                "rpc.system": "grpc",
                                "rpc.service": "InventoryService",
                                "rpc.method": "ReserveStock",
                            },
                            error_rate=0.02,
                            error_status="insufficient stock",
                            children=[
                                SpanTemplate(
                                    name="SELECT stock",
                                    service="inventory-service",
                                    kind=SpanKind.CLIENT,
                                    duration=_ms(8),
                                    attributes={
                                        "db.system": "postgresql",
                                        "db.namespace": "inventory",
                                        "db.query.text": (
                                            "SELECT available_qty FROM stock WHERE sku IN (...)"
                                        ),
                                    },
                                )
                            ],
                        ),
                        SpanTemplate(
                            name="CalculateTotal",
                            service="pricing-service",
                            kind=SpanKind.CLIENT,
                            duration=_ms(15),
                            attributes={
                                "rpc.system": "grpc",
                                "rpc.service": "PricingService",
                                "rpc.method": "CalculateTotal",
                            },
                            logs=[
                                LogTemplate(
                                    level="DEBUG",
                                    message="Applied discount code",
                                    attributes={"discount.percent": "10"},
                                )
                            ],
                        ),
                        SpanTemplate(
                            name="INSERT order",
                            service="order-service",
                            kind=SpanKind.CLIENT,
                            duration=_ms(18),
                            attributes={
                                "db.system": "postgresql",
                                "db.namespace": "orders",
                                "db.query.text": "INSERT INTO orders (...) VALUES (...)",
                            },
                        ),
                    ],
                ),
                SpanTemplate(
                    name="order.created",
                    service="order-service",
                    kind=SpanKind.PRODUCER,
                    duration=_ms(5),
                    attributes={
                        "messaging.system": "nats",
                        "messaging.destination.name": "order.created",
                        "messaging.operation.name": "publish",
                    },
                ),
            ],
        ),
    )


def health_check_scenario() -> Scenario:
    """A single HTTP health-check span, for testing connectivity."""
    return Scenario(
        name="health-check",
        description="Simple HTTP health check for testing OTLP connectivity",
        services=[Service("health-service")],
        root_span=SpanTemplate(
            name="GET /health",
            service="health-service",
            kind=SpanKind.SERVER,
            duration=_ms(5),
            attributes={
                "http.request.method": "GET",
                "http.route": "/health",
                "url.path": "/health",
                "http.response.status_code": "200",
            },
            logs=[LogTemplate(level="INFO", message="Health check passed")],
        ),
    )


REGISTRY: dict[str, Scenario] = {}


def register(scenario: Scenario) -> None:
    """Add a scenario to the registry under its name, replacing any previous one."""
    REGISTRY[scenario.name] = scenario


def get(name: str) -> Scenario | None:
    """The registered scenario called ``name``, or None."""
    return REGISTRY.get(name)


def list_scenarios() -> list[str]:
    """Names of all registered scenarios."""
    return list(REGISTRY)


for _builtin in (payment_scenario, edge_iot_scenario, ecommerce_scenario, health_check_scenario):
    register(_builtin())