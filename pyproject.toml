[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "headunit"
version = "0.1.0"
description = "Plugin host for a car head unit: plugin registry, message routing, media players, panel and theme settings, and audio processor control"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "car",
    "head-unit",
    "infotainment",
    "plugins",
    "media",
    "settings",
    "audio-processor",
    "tda7418",
    "hvac",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
headunit = "headunit.main:main"

[tool.hatch.build.targets.wheel]
packages = ["headunit"]

[tool.hatch.build.targets.sdist]
include = ["headunit", "tests", "pyproject.toml"]

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
