"""Setup script for knowledge-explorer."""

from setuptools import find_packages, setup

setup(
    name="knowledge-explorer",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "kuzu>=0.3.0",
        "aiohttp>=3.9",
        "fastapi>=0.100",
        "pydantic>=1.10",
        "uvicorn>=0.23",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "knowledge-explorer=knowledge_explorer.__main__:main",
        ],
    },
)
