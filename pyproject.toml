[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "verticaquery"
version = "0.1.0"
description = "SQL placeholder lexing, argument interpolation, result row decoding and row caching for Vertica clients"
requires-python = ">=3.10"
dependencies = []
keywords = ["vertica", "sql", "database", "query", "rows", "lexer", "placeholders"]
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
    "Topic :: Database :: Front-Ends",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["verticaquery"]

[tool.pytest.ini_options]
addopts = "-ra"
