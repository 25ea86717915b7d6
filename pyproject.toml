[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vidgrab"
version = "0.9.8"
description = "Extract and download videos, images and audio from popular video and media sites"
requires-python = ">=3.10"
keywords = ["video", "download", "downloader", "extractor", "m3u8", "media"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Multimedia :: Video",
]
dependencies = [
    "requests",
    "beautifulsoup4",
    "tqdm",
    "termcolor",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["vidgrab"]

[tool.hatch.build.targets.sdist]
include = ["vidgrab", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
