from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="guided-breathing",
    version="1.0.0",
    author="EDGE Technologies",
    author_email="dev@edge-glasses.com",
    description="Guided breathing timing engine with terminal and smart glasses output",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/edge-glasses/guided-breathing",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Human Machine Interfaces",
    ],
    python_requires=">=3.8",
    install_requires=[
        "bleak>=0.21.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    keywords="breathing meditation relaxation pacer ble glasses",
    entry_points={
        "console_scripts": [
            "guided-breathing=guided_breathing.cli:cli_main",
        ],
    },
)
