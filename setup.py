import pathlib

from setuptools import find_packages, setup

HERE = pathlib.Path(__file__).parent
version_file = HERE / "version.txt"

with open(version_file, "r", encoding="utf-8") as fh:
    version = fh.readlines()[-1].strip()

with open(HERE / "README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open(HERE / "requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [
        line.strip()
        for line in fh
        if line.strip() and not line.startswith("#") and not line.startswith("-e")
    ]

setup(
    name="ski_corridor",
    version=version,
    author="Michael Medek",
    author_email="michimedi@gmail.com",
    description="Procedural ski corridor terrain: path spine, canyon walls, jumps and obstacles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["ski_corridor", "ski_corridor.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.4", "hypothesis>=6.90"],
    },
    classifiers=[
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    include_package_data=True,
    zip_safe=False,
)
