#!/usr/bin/env python3
"""hostdeploy CLI - Setup"""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="hostdeploy",
    version="1.0.0",
    description="Deploy a containerized git repository to a remote host behind nginx",
    author="hostdeploy Team",
    packages=find_packages(include=["hostdeploy", "hostdeploy.*"]),
    package_data={"hostdeploy": ["stubs/nginx/*.j2"]},
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "hostdeploy=hostdeploy.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
