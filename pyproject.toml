[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yinx"
version = "0.1.0"
description = "Penetration-testing companion core: pattern-driven entity extraction, three-tier output filtering and host/service correlation"
requires-python = ">=3.11"
dependencies = []
keywords = [
    "pentest",
    "security",
    "entity-extraction",
    "log-filtering",
    "deduplication",
    "clustering",
    "correlation",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Information Technology",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Text Processing :: Filters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["yinx"]

[tool.hatch.build.targets.sdist]
include = ["yinx", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
