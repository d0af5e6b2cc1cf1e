[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ibtelemetry"
version = "0.1.0"
description = "Read and write racing-simulator telemetry files (.ibt) and query their YAML session info"
requires-python = ">=3.10"
dependencies = []
keywords = ["telemetry", "ibt", "sim-racing", "session-info", "yaml"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ibtelemetry"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
