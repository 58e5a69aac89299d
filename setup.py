from setuptools import setup

with open("README.md", "r") as fh:
    long_description = fh.read()

with open('requirements.txt') as f:
    requirements = f.read().splitlines()

setup(
    name="meshfill",
    version="0.01",
    packages=["meshfill",],
    license="MIT",
    description="Got holes in your triangle meshes? Use this tool to close them!",
    install_requires=requirements,
    extras_require={
        "viewer": ["vedo"],
        "test": ["pytest"],
    },
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires='>=3.6',
)
