[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oxidemc"
version = "0.1.0"
description = "A minimal Minecraft protocol server and logging proxy built on asyncio"
requires-python = ">=3.10"
dependencies = []
keywords = ["minecraft", "protocol", "proxy", "asyncio", "varint", "server"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
oxidemc = "oxidemc.server:main"

[tool.hatch.build.targets.wheel]
packages = ["oxidemc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
