from pathlib import Path

from setuptools import find_packages, setup


setup(
    name="scatterpick",
    version="0.1",
    description="Nearest-point highlighting for interactive Matplotlib "
                "scatter plots.",
    long_description=Path(__file__).with_name("README.rst").read_text(
        encoding="utf-8"),
    long_description_content_type="text/x-rst",
    classifiers=[
        "Framework :: Matplotlib",
        "Programming Language :: Python :: 3",
    ],
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.8",
    install_requires=[
        "matplotlib>=3.5",
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
