[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "triggeralgs"
version = "1.3.2"
description = "Streaming trigger algorithms that turn detector trigger primitives into activities, candidates and decisions"
requires-python = ">=3.10"
dependencies = []
keywords = ["trigger", "daq", "physics", "clustering", "dbscan", "lartpc"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["triggeralgs"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
