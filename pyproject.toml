[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "agtx"
version = "0.1.0"
description = "Git worktree, pull request and agent skill helpers for running coding agents on isolated task branches"
requires-python = ">=3.10"
dependencies = []
keywords = ["git", "worktree", "agents", "pull-request", "skills"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["agtx"]

[tool.pytest.ini_options]
addopts = "-ra"
