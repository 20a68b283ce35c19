"""
kpm-transport: Linear-Scaling Quantum Transport (KPM)
"""

from setuptools import setup, find_packages

setup(
    name="kpm_transport",
    version="0.1.0",
    description="Linear-scaling quantum transport with the Kernel Polynomial Method",
    long_description=open("README.md").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["kpm_transport", "kpm_transport.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "typer>=0.9.0",
    ],
    extras_require={
        "gpu": ["cupy>=10.0.0"],
        "test": ["pytest>=7.0"],
        "full": ["cupy>=10.0.0", "pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "kpm-transport=kpm_transport.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Physics",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
