[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pura"
version = "0.1.0"
description = "Scrape, download and emulate podcast feeds."
requires-python = ">=3.10"
keywords = ["podcast", "rss", "simplecast", "id3", "scraper"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio",
]
dependencies = [
    "requests",
    "beautifulsoup4",
    "pyyaml",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
pura = "pura.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pura"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
