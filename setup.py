from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="qccpfr",
    version="0.1.0",
    description=(
        "Facial-reduction transformation matrices for SDP relaxations of the "
        "Quadratic Cycle Cover Problem."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.9",
    install_requires=["numpy", "scipy>=1.9", "networkx"],
    extras_require={"test": ["pytest"]},
    tests_require=["pytest"],
)
