"""
Setup script for the glitch-duel package.

Installs the match engine (state machine, timing, sync adapter) from
``src/`` together with the ``glitch-duel`` command-line entry point.
"""

from setuptools import setup, find_packages

setup(
    name="glitch-duel",
    version="1.0.0",
    description="Two-player timed arithmetic quiz engine over a pub/sub channel",
    author="Glitch Duel Maintainers",
    license="MIT",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
        "dev": [
            "pytest>=7.4",
            "build",
            "wheel",
        ],
    },
    entry_points={
        "console_scripts": [
            "glitch-duel=glitch_duel.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Games/Entertainment",
    ],
)
