[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "redisbarrier"
version = "0.1.0"
description = "A distributed barrier synchronization primitive backed by Redis"
requires-python = ">=3.10"
dependencies = [
    "redis",
]
keywords = ["redis", "barrier", "synchronization", "distributed", "concurrency"]
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
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
redisbarrier-demo = "redisbarrier.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["redisbarrier"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
