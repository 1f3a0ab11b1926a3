from setuptools import setup, find_packages

setup(
    name="PredPreyPlant",
    version="0.1",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    description="Continuous predator-prey-plant ecology with discrete heritable traits, genotype tracking, a pygame viewer and matplotlib charts.",
    author="P. van Doesburg",
    author_email="petervandoesburg11@gmail.com",
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pygame",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
