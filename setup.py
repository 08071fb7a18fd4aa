#!/usr/bin/env python3
"""
Setup script for DiagramForge

Install with:
    pip install -e .

With test tooling:
    pip install -e ".[dev]"
"""

from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

# Backend service dependencies
backend_requirements = [
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.27.0",
    "pydantic>=2.5.0",
    "pydantic-settings>=2.1.0",
    "sqlalchemy[asyncio]>=2.0.25",
    "aiosqlite>=0.19.0",
    "aiofiles>=23.2.1",
]

# CLI dependencies
cli_requirements = [
    "rich>=13.7.0",
]

# Maven scaffold copied into every generated project
SCAFFOLD = "templates/spring_demo"

setup(
    name="diagramforge",
    version="1.0.0",
    description="DiagramForge - class diagram to Spring Boot project and Postman collection generator",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="DiagramForge Team",
    license="MIT",
    packages=find_namespace_packages(
        where="backend", include=["app", "app.*"], exclude=["app.templates*"]
    ) + ["cli"],
    package_dir={"app": "backend/app", "cli": "cli"},
    package_data={
        "app": [
            f"{SCAFFOLD}/pom.xml",
            f"{SCAFFOLD}/mvnw",
            f"{SCAFFOLD}/mvnw.cmd",
            f"{SCAFFOLD}/.mvn/wrapper/*",
            f"{SCAFFOLD}/src/main/resources/*",
            f"{SCAFFOLD}/src/main/java/com/example/demo/*",
        ],
    },
    python_requires=">=3.9",
    install_requires=backend_requirements + cli_requirements,
    extras_require={
        "cli": cli_requirements,
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.26.0",
            "faker>=22.0.0",
            "black>=24.1.0",
            "isort>=5.13.0",
            "mypy>=1.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "diagramforge=cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Environment :: Web Environment",
        "Framework :: FastAPI",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development",
        "Topic :: Software Development :: Code Generators",
    ],
    keywords="uml class-diagram code-generation spring-boot jpa postman",
)
