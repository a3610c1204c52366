[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imkit"
version = "0.1.0"
description = "Building blocks for instant-messaging servers: buffered I/O, buffer pools, a timer heap and a minimal WebSocket server layer"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["websocket", "bufio", "timer", "buffer pool", "messaging"]
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
    "Topic :: Software Development :: Libraries",
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["imkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
