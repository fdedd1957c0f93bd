"""A setuptools based setup module.
See:
https://packaging.python.org/guides/distributing-packages-using-setuptools/
https://github.com/pypa/sampleproject
"""

# Always prefer setuptools over distutils
from setuptools import setup, find_packages
import pathlib

here = pathlib.Path(__file__).parent.resolve()

# Get the long description from the README file
#long_description = (here / "README.md").read_text(encoding="utf-8")

setup(
    name="pychip8",
    version="0.0.1",
    description="A simple Python based interpreter for the CHIP-8 virtual machine",
    # long_description=long_description,  # Optional
    # long_description_content_type="text/markdown",  # Optional
    author="Sam Hill",
    author_email="sam.j.hill@protonmail.com",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: System :: Emulators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3 :: Only",
    ],
    keywords="emulator, interpreter, chip8",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9, <4",
    install_requires=["numpy"],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "pychip8=pychip8.emulator:main",
        ],
    },
)
