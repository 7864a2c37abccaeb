# setup.py
from setuptools import setup, find_packages

setup(
    name="jsconcat",
    version="1.0.0",
    description="Concatenate scripts through //@append and //@prepend directives, with composed source maps",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "sourcemap>=0.2.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'jsconcat=jsconcat.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
