[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "skribidi"
version = "0.1.0"
description = "Bidirectional text layout model: line breaking, caret navigation, selection geometry and glyph/icon raster helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["bidi", "text layout", "caret", "selection", "sdf", "fonts", "typography"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Fonts",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["skribidi"]

[tool.pytest.ini_options]
addopts = "-ra"
