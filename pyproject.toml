[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imchat"
version = "0.1.0"
description = "Instant-messaging building blocks: chat data model, client navigation state, file storage and message storage services"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "instant messaging", "messages", "file storage"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["imchat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
