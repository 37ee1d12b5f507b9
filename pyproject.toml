[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cloudssh"
version = "0.1.0"
description = "SSH signers backed by cloud key management services (AWS KMS and Azure Key Vault)"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["ssh", "kms", "key vault", "signing", "rsa-sha2", "ecdsa", "hsm"]
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
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["cloudssh"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
