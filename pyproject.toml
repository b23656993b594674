[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minnowtcp"
version = "0.1.0"
description = "A small user-space TCP: byte streams, reassembly, wrapping sequence numbers, receiver and sender."
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "networking", "byte-stream", "reassembler", "sequence-numbers"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["minnowtcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
