[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ultimalive"
version = "0.1.0"
description = "Map definitions, block checksums, hash-query answers and byte-signature search for a tile-map game client"
requires-python = ">=3.10"
dependencies = []
keywords = ["map", "tiles", "crc32", "fletcher16", "signature-scan", "packets"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Role-Playing",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ultimalive"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
