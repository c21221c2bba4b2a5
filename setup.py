"""Setup script for the bndy calendar core package."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements, keeping test tooling out of install_requires
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
dev_requirements = []

if requirements_file.exists():
    for line in requirements_file.read_text().splitlines():
        line = line.strip()
        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        if line.startswith("pytest"):
            dev_requirements.append(line)
        else:
            requirements.append(line)

setup(
    name="bndy-calendar",
    version="1.0.0",
    description="Calendar core for bndy: recurring events, iCal export/import and event permissions",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="bndy",
    url="https://bndy.app",
    packages=find_packages(exclude=["tests*", "docs*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "test": dev_requirements,
        "dev": dev_requirements
        + [
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
        "Framework :: AsyncIO",
    ],
    keywords="calendar ical ics rrule recurrence band rehearsal gig",
    entry_points={
        "console_scripts": [
            "bndy-calendar=bndy_calendar.__main__:main",
        ],
    },
    zip_safe=False,
)
