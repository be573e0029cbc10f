[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "azmq"
version = "0.1.0"
description = "Asynchronous ZeroMQ building blocks: ZMTP framing, greetings, commands, mailboxes and contexts"
requires-python = ">=3.10"
dependencies = []
keywords = ["zeromq", "zmq", "zmtp", "asyncio", "messaging"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["azmq"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
