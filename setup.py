from setuptools import setup, find_packages

setup(
    name="flowtee",
    version="0.1.0",
    description="A command execution and output capture tool",
    packages=find_packages(include=["flowtee", "flowtee.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0.0",
        "rich>=13.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pyfakefs>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "flowtee=flowtee.cli:main",
        ]
    },
  )
