"""
Spill Setup
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read() if f else ""

setup(
    name="spill",
    version="0.1.0",
    author="Spill Developers",
    description="UDP printer-advertisement sender with a minimal IPP callback listener",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["spill", "spill.*"]),
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-timeout>=2.2.0",
            "httpx>=0.25.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "spill=spill.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Information Technology",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security",
        "Topic :: System :: Networking",
    ],
    keywords="ipp cups printer udp network-testing",
)
