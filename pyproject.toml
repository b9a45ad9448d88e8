[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "streamtable"
version = "0.1.0"
description = "Key-value table storages, topic management and an in-memory test harness for stream processing applications"
requires-python = ">=3.10"
dependencies = []
keywords = ["stream-processing", "kafka", "storage", "key-value", "testing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["streamtable"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
