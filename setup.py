"""
Installer configuration for Twintag package.
"""

from setuptools import setup, find_packages

setup(
    name="twintag",
    version="1.0.0",
    description="SDK for the Twintag bag storage service",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "httpx>=0.23.0",
        "cryptography>=39.0.0",
        "pydantic>=2.0.0",
        "PyJWT>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "respx>=0.20.0",
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "twintag=twintag.cli.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
