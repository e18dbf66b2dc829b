[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nbnslib"
version = "0.1.0"
description = "NetBIOS protocol building blocks: name encoding, name service packets and replies, session framing"
requires-python = ">=3.10"
dependencies = []
keywords = ["netbios", "nbns", "smb", "name-service", "ntlmv2"]
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
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nbnslib"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
