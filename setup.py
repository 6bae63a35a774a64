from setuptools import setup, find_packages

setup(
    name="bridgechain",
    version="0.1.0",
    packages=find_packages(include=["bridgechain", "bridgechain.*"]),
    install_requires=[
        "pydantic>=2",
        "pydantic-settings",
        "structlog",
        "click",
        "pycryptodome",
        "coincurve",
        "mnemonic",
        "base58"
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "bridgechain=bridgechain.cli:cli",
        ],
    }
)
