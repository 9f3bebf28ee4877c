from setuptools import setup, find_packages


setup(
    name="ebl",
    version="0.1",
    packages=find_packages(include=["ebl", "ebl.*"]),
    description="Streaming decoder for EBL0 length-prefixed blob record streams.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "ebl=ebl.cli:main",
        ]
    },
)
