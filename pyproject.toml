[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jwsig"
version = "0.1.0"
description = "JSON Web Signature (JWS) creation, verification and serialization with HMAC, ECDSA and RSA keys"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["jose", "jws", "jwk", "json web signature", "hmac", "ecdsa", "rsa"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
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
packages = ["jwsig"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
