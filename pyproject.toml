[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "selectserv"
version = "0.1.0"
description = "Small select()-driven TCP servers, a two-room chat relay, a CGI runner and a brace-style configuration checker"
requires-python = ">=3.10"
dependencies = []
keywords = ["select", "tcp", "server", "chat", "echo", "cgi", "configuration"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Communications :: Chat",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
selectserv-chatroom = "selectserv.chatroom:main"
selectserv-cgi = "selectserv.cgi:main"
selectserv-echo = "selectserv.echo_server:main"
selectserv-multi = "selectserv.multi_server:main"
selectserv-client = "selectserv.client:main"
selectserv-check-config = "selectserv.directives:main"

[tool.hatch.build.targets.wheel]
packages = ["selectserv"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
