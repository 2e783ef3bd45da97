from setuptools import setup, find_packages

setup(
    name="eventsite",
    version="0.1.0",
    packages=find_packages(include=["eventsite", "eventsite.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "pydantic-settings>=2",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg",
        "aiosqlite",
        "typing_extensions",
        "PyJWT>=2",
        "qrcode>=7.4",
        "pypng",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
)
