"""
VitalDiff - Web Vitals Release Comparison for sitespeed.io

Runs sitespeed.io for a release, files its browsertime summaries and builds
HTML dashboards comparing Core Web Vitals release over release.

Features:
- Multi-release dashboard with one section per tested page
- Pairwise before/after comparison of two summaries
- Lighthouse-style log-normal performance score per section
- sitespeed.io run, result filing and cleanup workflow
- Self-contained HTML reports with interactive charts
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else __doc__

setup(
    name="vitaldiff",
    version="1.0.0",
    description="Web Vitals release comparison dashboards for sitespeed.io results",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Shawky",
    python_requires=">=3.8",
    packages=find_packages(include=["release_comparison", "release_comparison.*"]),
    install_requires=[
        "numpy>=1.20.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "scipy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "vitaldiff-releases=release_comparison.compare_results:main_releases",
            "vitaldiff-compare=release_comparison.compare_results:main_compare",
            "vitaldiff-sitespeed=release_comparison.sitespeed_workflow:main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Topic :: Software Development :: Quality Assurance",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    keywords="performance web-vitals sitespeed.io lighthouse release comparison",
)
