# setup.py
from setuptools import setup, find_packages

setup(
    name="lib_scout",
    version="0.1.0",
    description="Асинхронный краулер LibScout: поиск, загрузка сайтов и анализ их скриптов",
    packages=find_packages(include=["lib_scout", "lib_scout.*"]),
    package_data={"lib_scout": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "lib_scout=lib_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
