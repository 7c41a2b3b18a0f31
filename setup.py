from setuptools import setup, find_packages

setup(
    name="codewire",
    version="0.1.0",
    description="CodeWire - Tech News Aggregator and Q&A Board",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9.0",
        "beautifulsoup4>=4.11.0",
        "tqdm>=4.62.0",
        "backoff>=1.11.0",
        "pyyaml>=6.0",
        "async-timeout>=4.0.0",
        "python-dotenv>=1.0.0",
        "anthropic>=0.40.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "codewire=codewire.cli:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
