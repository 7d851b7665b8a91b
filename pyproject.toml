[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sarah"
version = "4.0.0"
description = "Chat bot building blocks: input and output messages, configuration locks, cron-style task scheduling and a Gitter adapter."
requires-python = ">=3.10"
dependencies = []
keywords = ["chatbot", "bot", "gitter", "scheduler", "cron", "chat"]
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
    "Topic :: Communications :: Chat",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sarah"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
