[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sofakit"
version = "2.0.0"
description = "Building blocks for driver-agnostic clients of CouchDB-like document databases"
requires-python = ">=3.10"
dependencies = []
keywords = ["couchdb", "database", "document", "nosql", "client"]
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
packages = ["sofakit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
