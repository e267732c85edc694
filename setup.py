from setuptools import find_packages, setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="SwayFocus",
    version="0.1",
    description="Directional focus for Sway and i3 that picks the right neighbor",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "orjson",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.10",
    package_data={
        "swayfocus": ["settings.json"],
    },
    entry_points={
        "console_scripts": ["swayfocus=swayfocus.cli:main"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
    ],
)
