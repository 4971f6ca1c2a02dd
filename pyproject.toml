[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "liminaldb"
version = "0.1.0"
description = "Building blocks of a small SQL database: a parser, a binary table file format, B-tree indexes and stored procedure files"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "sql", "parser", "btree", "storage-engine"]
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
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["liminaldb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
