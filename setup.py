import os

from setuptools import find_packages, setup

setup(
    name="inter-struct",
    version="0.1.0",
    packages=find_packages(include=["inter_struct", "inter_struct.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.10.6,<3.0.0",
        "pydantic-settings>=2.2,<3.0.0",
        "typer>=0.12",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "inter-struct=inter_struct.cli:main",
        ],
    },
    author="inter-struct Contributors",
    description="Field-mapping synthesis between record classes: conversions and merges",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
)
