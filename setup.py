# setup.py
from setuptools import setup, find_packages

setup(
    name="site_kb",
    version="0.1.0",
    description="Асинхронный краулер, собирающий базу знаний сайта (контакты, часы работы, услуги)",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"site_kb.report": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=4.9",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.2",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-kb=site_kb.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
