[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chemimport"
version = "0.1.0"
description = "Import chemicals and chemical recipes from a CSV spreadsheet into an inventory service over HTTP."
requires-python = ">=3.10"
keywords = ["chemicals", "inventory", "csv", "import", "laboratory"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
    "Topic :: Scientific/Engineering :: Chemistry",
]
dependencies = [
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
chemimport = "chemimport.importer:main"

[tool.hatch.build.targets.wheel]
packages = ["chemimport"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
