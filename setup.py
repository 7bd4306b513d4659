from setuptools import setup, find_packages
import os
import re

# Function to extract version from version.py
def get_version(module_file):
    """Return package version as listed in `__version__` in `version.py`."""
    # Assumes version.py is at the root relative to setup.py
    version_py_path = os.path.join(os.path.dirname(__file__), module_file)
    if not os.path.exists(version_py_path):
         raise RuntimeError(f"Unable to find {module_file} next to setup.py.")

    with open(version_py_path, 'r', encoding='utf-8') as f:
         version_py = f.read()

    match = re.search("__version__ = ['\"]([^'\"]+)['\"]", version_py)
    if match:
        return match.group(1)
    else:
         raise RuntimeError(f"Unable to find __version__ string in {version_py_path}")

version = get_version('version.py')

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="youtubelink",
    version=version,
    description="Redirects to, or streams, the direct mp4 link of YouTube videos",
    long_description=long_description,
    long_description_content_type="text/markdown",
    # Flat layout: top-level modules plus the api, services and cli packages
    py_modules=[
        "config", "exceptions", "logging_config", "main", "middleware",
        "models", "server", "utils", "version",
    ],
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Framework :: FastAPI",
        "Operating System :: POSIX",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "youtubelink=server:main",
            "youtubelink-cli=cli.youtubelink_cli:main",
        ],
    },
)
