[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netdisplays"
version = "0.97.0"
description = "Sink and provider model for network displays: de-duplication, sink URIs, stream unit and firewall zone helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["miracast", "wifi-display", "screencast", "network-displays", "firewalld", "systemd"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Display",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["netdisplays"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
