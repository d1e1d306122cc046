[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "espcli"
version = "0.1.0"
description = "Building blocks for command-line tools that flash and monitor Espressif devices"
requires-python = ">=3.11"
keywords = ["esp32", "espressif", "embedded", "serial", "monitor", "defmt", "cargo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Typing :: Typed",
]
dependencies = [
    "pyserial",
    "platformdirs",
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["espcli"]

[tool.hatch.build.targets.sdist]
include = ["espcli", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
