[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "threadwars"
version = "0.1.0"
description = "Two-player split-screen survival arcade game: collect solar cells, build chargers, and hold off waves of zombies."
requires-python = ">=3.10"
keywords = ["game", "arcade", "split-screen", "co-op", "zombies", "pygame"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: MacOS X",
    "Environment :: Win32 (MS Windows)",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Arcade",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
threadwars = "threadwars.app:main"

[tool.hatch.build.targets.wheel]
packages = ["threadwars"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
