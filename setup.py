from setuptools import find_packages, setup


setup(
    name="instrumented-db",
    version="0.1.0",
    description="Instrumentation proxies for database connections, commands, readers and transactions",
    packages=find_packages(exclude=["tests*"]),
    python_requires=">=3.8",
    zip_safe=False,
    install_requires=[
        "attrs>=20",
        "envier>=0.5",
        "wrapt>=1.14",
    ],
    extras_require={
        "test": [
            "mock",
            "pytest",
            "pytest-asyncio",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Database",
    ],
)
