[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chipemu"
version = "0.1.0"
description = "A CHIP-8 interpreter with a pygame window, keypad and square-wave beeper"
requires-python = ">=3.10"
dependencies = [
    "pygame",
]
keywords = ["chip-8", "chip8", "emulator", "interpreter", "retro", "pygame"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
chipemu = "chipemu.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["chipemu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
