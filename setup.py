# setup.py
from setuptools import setup, find_packages

setup(
    name="site_purge",
    version="0.1.0",
    description="Обход сайта и удаление неиспользуемых CSS-правил",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "soupsieve>=2.5",
        "cssutils>=2.9",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-purge=site_purge.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
