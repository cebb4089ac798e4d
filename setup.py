from setuptools import setup, find_packages

setup(
    name="nq-server",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "fastapi>=0.110",
        "starlette>=0.37",
        "uvicorn>=0.29",
        "hypercorn>=0.16",
        "pydantic>=2.5",
        "structlog>=24.1",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio>=0.23",
            "httpx[http2]",
        ],
    },
    entry_points={
        "console_scripts": [
            "nq-server=nq_server.core.cli:main",
        ],
    },
    description="HTTP server exposing latency, download and upload measurement endpoints.",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
)
