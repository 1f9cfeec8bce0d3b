[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minicc"
version = "0.1.0"
description = "Syntax tree, symbol table and x86-64 assembly generator for a small C-like language"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "assembly", "x86-64", "code generation", "ast", "symbol table"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["minicc"]

[tool.hatch.build.targets.sdist]
include = ["minicc", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
