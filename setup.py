# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="tracelog",
    version="1.0.0",
    description="Leveled trace logging with file mirroring, log directory retention and email alerts",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["tracelog", "tracelog.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests",  # HTTP mail relay transport
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'tracelog=tracelog.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
