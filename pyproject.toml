[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eaio"
version = "0.1.0"
description = "A small edge-triggered epoll event loop with coroutine-based file, socket and signal descriptor handles"
requires-python = ">=3.10"
dependencies = []
keywords = ["epoll", "event loop", "coroutines", "async", "non-blocking io", "signalfd"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["eaio"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
