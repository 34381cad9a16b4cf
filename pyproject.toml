[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "otelkit"
version = "0.1.0"
description = "Config-driven telemetry helpers: span naming, baggage, OTLP exporter settings and a trace/log scenario simulator"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "opentelemetry",
    "otlp",
    "tracing",
    "telemetry",
    "baggage",
    "observability",
    "simulator",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
otlp-sim = "otelkit.sim.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["otelkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
