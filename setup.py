"""
Setup script for the JobSwipe project.

Allows development installation with `pip install -e .`
Test dependencies: `pip install -e ".[test]"`
"""

from setuptools import setup, find_packages

setup(
    name="job-swipe",
    version="1.0.0",
    packages=find_packages(include=["jobswipe", "jobswipe.*", "swipe_service", "swipe_service.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "pymongo>=4.6",
        "httpx>=0.27",
        "langchain-core>=0.2",
        "langchain-openai>=0.1",
        "json-repair>=0.25",
        "beautifulsoup4>=4.12",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "pytest-mock>=3.12",
        ],
    },
)
