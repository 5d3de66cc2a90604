[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ursheet"
version = "0.1.0"
description = "A tiny plain-text spreadsheet evaluator and pretty-printer"
requires-python = ">=3.10"
dependencies = []
keywords = ["spreadsheet", "table", "formula", "cli", "plain-text"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Spreadsheet",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ursh = "ursheet.sheet:main"

[tool.hatch.build.targets.wheel]
packages = ["ursheet"]

[tool.pytest.ini_options]
addopts = "-ra"
