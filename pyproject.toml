[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "miniredis"
version = "0.4.1"
description = "Command layer of a small Redis-compatible server: parsing, encoding and applying commands over RESP frames."
requires-python = ">=3.10"
dependencies = []
keywords = ["redis", "resp", "pubsub", "key-value", "asyncio"]
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
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["miniredis"]

[tool.pytest.ini_options]
addopts = "-ra"
