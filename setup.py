"""
apimodel - OpenAPI schema parser and model generator
Install: pip install -e .
"""

from setuptools import setup, find_packages

setup(
    name="apimodel",
    version="1.0.0",
    author="apimodel contributors",
    author_email="",
    description="Parse OpenAPI 3 documents into resolved schemas, endpoint catalogs, "
    "model mappings, validation rules and generated model sources",
    long_description=__doc__,
    long_description_content_type="text/plain",
    packages=find_packages(exclude=("tests", "tests.*")),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "httpx>=0.24.0",
        "cachetools>=5.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "apimodel=apimodel.cli:main",
        ],
    },
    keywords="openapi, swagger, parser, code-generator, models, validation",
)
