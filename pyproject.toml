[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kvprovider"
version = "0.1.0"
description = "KubeVirt virtual machine and data volume tooling: schema conversion, quantities, a REST client, provider configuration and Terraform workspace helpers"
requires-python = ">=3.10"
keywords = ["kubevirt", "kubernetes", "datavolume", "virtual-machine", "terraform", "cdi", "kubeconfig"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "requests>=2.28",
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["kvprovider"]

[tool.hatch.build.targets.sdist]
include = ["kvprovider", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
