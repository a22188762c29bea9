from setuptools import setup, find_packages
import os
import re

# Read the version from __init__.py
with open(os.path.join('gffmap', '__init__.py'), 'r') as f:
    version_file = f.read()
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", version_file, re.M)
    if version_match:
        version = version_match.group(1)
    else:
        version = "0.1.0"  # Default if not found

# Read the long description from README.md
with open('README.md', 'r') as f:
    long_description = f.read()

setup(
    name="gffmap",
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        "numpy>=1.20.0",
        "matplotlib>=3.5.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=2.12.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'gffmap=gffmap.cli:main',
        ],
    },
    description="GFF3 parser and zoomable, non-overlapping genomic feature map",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords="bioinformatics, genomics, annotation, GFF3, genome browser, visualization",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Scientific/Engineering :: Visualization",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
    ],
    python_requires=">=3.8",
)
