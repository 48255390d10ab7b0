[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dtlswire"
version = "0.1.0"
description = "Encoding and decoding of the DTLS 1.2 wire format: records, handshakes, extensions and alerts"
requires-python = ">=3.10"
dependencies = []
keywords = ["dtls", "tls", "protocol", "wire-format", "handshake", "record-layer"]
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
    "Topic :: Internet",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dtlswire"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
