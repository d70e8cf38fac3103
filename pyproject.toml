[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dockertestkit"
version = "0.1.0"
description = "Building blocks for integration tests against Docker containers: images, ports, mounts, log streams and readiness conditions."
requires-python = ">=3.10"
dependencies = []
keywords = ["docker", "containers", "integration-testing", "testing", "wait-strategies"]
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
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
dockertestkit-build-images = "dockertestkit.build_images:main"
dockertestkit-simple-web-server = "dockertestkit.simple_web_server:main"
dockertestkit-no-expose-port = "dockertestkit.no_expose_port:main"

[tool.hatch.build.targets.wheel]
packages = ["dockertestkit"]

[tool.hatch.build.targets.sdist]
include = ["dockertestkit", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
