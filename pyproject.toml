[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pktbench"
version = "0.1.0"
description = "UDP and raw-socket traffic generator and latency meter: send, receive, echo and ping-pong benchmarks"
requires-python = ">=3.10"
dependencies = []
keywords = ["benchmark", "traffic-generator", "udp", "raw-sockets", "latency", "throughput"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing :: Traffic Generation",
    "Topic :: System :: Benchmark",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pktbench = "pktbench.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pktbench"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
