from setuptools import find_packages, setup

setup(
    name="wwsvc",
    version="0.0.0",
    packages=find_packages(exclude=("tests", "tests.*", "examples")),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "cryptography",
        "requests",
        "httpx",
        "click",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "fastapi",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "wwsvc=wwsvc.cli:cli",
        ],
    },
)
