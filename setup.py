"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 11th 2025
"""
from typing import Any
from setuptools import setup, find_packages
import os

this_directory = os.path.abspath(os.path.dirname(__file__))

# Read long description from the design notes
long_description = ""
design_path = os.path.join(this_directory, 'DESIGN.md')
if os.path.exists(design_path):
    with open(design_path, encoding='utf-8') as f:
        long_description = f.read()

TEST_REQUIREMENTS = [
    'pytest>=7.4.0',
    'pytest-asyncio>=0.21.0',
]


def parse_requirements():
    """Parse requirements.txt and separate PyPI packages from Git URLs."""
    pypi_requirements: list[Any] = []
    git_requirements: list[Any] = []

    requirements_file = os.path.join(this_directory, 'requirements.txt')

    if not os.path.exists(requirements_file):
        print("Warning: requirements.txt not found")
        return pypi_requirements, git_requirements

    with open(requirements_file, 'r') as f:
        for line in f:
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith('#'):
                continue

            # Test tooling goes in the test extra
            if line.split('>=')[0].split('==')[0] in ('pytest', 'pytest-asyncio'):
                continue

            # Separate git URLs from regular packages
            if line.startswith('git+') or 'git+' in line:
                git_requirements.append(line)
            else:
                pypi_requirements.append(line)

    return pypi_requirements, git_requirements


# Parse requirements
pypi_requirements, git_requirements = parse_requirements()

setup(
    name="tourism-analytics-engine",
    version="1.0.0",
    author="Cameron Murphy",
    author_email="104967811@student.swin.edu.au",
    description="Analytics aggregation and forecast-fallback engine for tourism dashboards.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=['tests', 'tests.*']),
    py_modules=['app'],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Framework :: Flask",
    ],
    python_requires=">=3.9",
    install_requires=pypi_requirements,
    extras_require={
        'test': TEST_REQUIREMENTS,
    },
    entry_points={
        'console_scripts': [
            'tourism-analytics=app:main',
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords="tourism analytics dashboard forecast aiohttp flask",
)
