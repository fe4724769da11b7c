[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "atscaledebug"
version = "1.6.0"
description = "At-Scale Debug protocol definitions and external network transports (TCP and TLS) for a debug server."
requires-python = ">=3.10"
dependencies = []
keywords = ["debug", "jtag", "at-scale-debug", "bmc", "tls", "tcp"]
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
    "Topic :: Software Development :: Debuggers",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["atscaledebug"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
