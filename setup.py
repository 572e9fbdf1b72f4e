from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="inventory-tests",
    version="1.0.0",
    author="volkb79-2",
    description="Data-driven test oracle and browser journeys for an inventory management web application",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["inventory_tests", "inventory_tests.*"]),
    package_data={"inventory_tests": ["data/*.json"]},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Framework :: Pytest",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["hypothesis>=6.0"],
    },
)
