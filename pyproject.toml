[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aurup"
version = "12.0.0"
description = "Upgrade detection, VCS commit tracking, target classification and voting helpers for AUR packages"
requires-python = ">=3.10"
dependencies = []
keywords = ["aur", "pacman", "arch", "upgrade", "vcs", "packages", "vercmp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["aurup"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
