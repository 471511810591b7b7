[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "claw"
version = "0.1.0"
description = "Structs, field headers and packed lists for the Claw binary wire format"
requires-python = ">=3.10"
dependencies = []
keywords = ["serialization", "binary", "encoding", "wire-format", "struct"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["claw"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
