[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "htmlmarkdown"
version = "0.1.0"
description = "Pluggable HTML to Markdown conversion engine with whitespace collapsing, escaping and URL normalisation"
requires-python = ">=3.10"
keywords = ["html", "markdown", "converter", "whitespace", "url"]
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
    "Topic :: Text Processing :: Markup :: HTML",
    "Topic :: Text Processing :: Markup :: Markdown",
]
dependencies = [
    "html5lib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["htmlmarkdown"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
