[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "singlib"
version = "0.1.0"
description = "Networking building blocks: SOCKS4/5 wire formats, an SNTP client, integer ranges, ordered containers, stream helpers and task groups"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = [
    "socks",
    "socks5",
    "ntp",
    "sntp",
    "networking",
    "ranges",
    "linked-list",
    "linked-hash-map",
    "varint",
]
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
    "Topic :: System :: Networking",
    "Topic :: System :: Networking :: Time Synchronization",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["singlib"]

[tool.hatch.build.targets.sdist]
include = [
    "singlib",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
