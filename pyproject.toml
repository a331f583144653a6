[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "termslides"
version = "0.1.0"
description = "Building blocks for terminal slideshows: key bindings, configuration, snippet execution, speaker notes and HTML text styling."
requires-python = ">=3.10"
keywords = ["terminal", "slides", "presentation", "keybindings", "configuration"]
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
    "Topic :: Multimedia :: Graphics :: Presentation",
    "Topic :: Terminals",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["termslides"]

[tool.pytest.ini_options]
addopts = "-ra"
