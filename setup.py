import os

from setuptools import setup, find_packages

this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="pyFogPlace",
    version="0.1.0",
    description="Multi-objective module placement for fog computing topologies",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT License",
    packages=find_packages(include=["pyfogplace", "pyfogplace.*"]),
    python_requires=">=3.7",
    install_requires=["pandas", "networkx", "numpy", "tqdm"],
    extras_require={"test": ["pytest"]},
)
