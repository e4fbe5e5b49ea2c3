[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rtpvla"
version = "0.1.0"
description = "Encode and decode the RTP Video Layers Allocation (VLA) header extension"
requires-python = ">=3.10"
dependencies = []
keywords = ["rtp", "vla", "webrtc", "video", "header-extension", "simulcast"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Video",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rtpvla"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
