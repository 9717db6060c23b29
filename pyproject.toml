[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eurekaclient"
version = "0.1.0"
description = "Client for the Eureka service registry: register, heartbeat, unregister and query application instances."
requires-python = ">=3.10"
keywords = ["eureka", "service-discovery", "registry", "microservices", "client"]
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
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["eurekaclient"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
