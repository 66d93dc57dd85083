[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ta27parse"
version = "0.1.0"
description = "Tokenizer, source decoding and grammar tables for Python 2.7 source with type comments"
requires-python = ">=3.10"
dependencies = []
keywords = ["tokenizer", "python2", "grammar", "dfa", "type comments", "pep263"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ta27parse"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
