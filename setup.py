from setuptools import setup, find_packages

setup(
    name="terratracer",
    version="0.1.0",
    description="Drone flight playback viewer with synchronized video and alien detection log",
    author="TerraTracer Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"terratracer": ["assets/*.csv"]},
    python_requires=">=3.9",
    install_requires=[
        "PyQt6>=6.5.0",
        "pandas>=2.0.0",
        "numpy>=1.24.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "terratracer=terratracer.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
