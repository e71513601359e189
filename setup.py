from setuptools import setup, find_packages

setup(
    name="cee-index-contagion",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["settings", "exceptions", "run_report"],
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "arch",
        "statsmodels",
        "matplotlib",
        "seaborn",
        "tqdm",
        "psutil",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "cee-contagion-report=run_report:main",
        ],
    },
    python_requires=">=3.8",
)
