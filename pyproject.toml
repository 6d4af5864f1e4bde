[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "snihash"
version = "0.1.0"
description = "TLS ClientHello server-name parsing, 32-bit string hashes and an insertion-ordered hash table"
requires-python = ">=3.10"
dependencies = []
keywords = ["tls", "sni", "client-hello", "proxy", "hash", "hash-table"]
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
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["snihash"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
