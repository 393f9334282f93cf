[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "biathlon"
version = "0.1.0"
description = "Replay a biathlon competition from an event log and produce a race log and a results table"
requires-python = ">=3.10"
dependencies = []
keywords = ["biathlon", "competition", "race", "events", "results", "simulation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
biathlon = "biathlon.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["biathlon"]

[tool.pytest.ini_options]
addopts = "-ra"
