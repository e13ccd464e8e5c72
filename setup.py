from setuptools import setup, find_packages

setup(
    name="nextbus-agency",
    version="0.1.0",
    description="Cached NextBus agency topology with batched real-time arrival predictions.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main_cli"],
    install_requires=[
        "requests",
        "python-dotenv",
        "pygeohash",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["nextbus-agency=main_cli:main"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.10',
)
