[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "devicelink"
version = "0.1.0"
description = "Telemetry server and device emulators exchanging JSON messages over TCP"
requires-python = ">=3.10"
dependencies = []
keywords = ["telemetry", "tcp", "json", "emulator", "monitoring", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
devicelink-server = "devicelink.server:main"
devicelink-client = "devicelink.client:main"

[tool.hatch.build.targets.wheel]
packages = ["devicelink"]

[tool.pytest.ini_options]
addopts = "-ra"
