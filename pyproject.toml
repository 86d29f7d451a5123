[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "camstream"
version = "0.1.0"
description = "Building blocks for a lightweight MJPEG-over-HTTP video streamer: request paths, MIME types, static files, listening sockets, a worker pool and command-line options."
requires-python = ">=3.10"
dependencies = []
keywords = ["mjpeg", "streaming", "http", "video", "webcam", "v4l2"]
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
    "Topic :: Multimedia :: Video :: Display",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["camstream*"]

[tool.pytest.ini_options]
addopts = "-ra"
