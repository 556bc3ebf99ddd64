[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ghostcore"
version = "0.1.0"
description = "Building blocks for a DAG ledger node: transactions, wire messages, a WebSocket client, token issuance and staking"
requires-python = ">=3.10"
keywords = ["dag", "ledger", "websocket", "staking", "token"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "websockets",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["ghostcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
