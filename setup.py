from setuptools import setup, find_packages

with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="linodyn",
    version="0.1.0",
    author="Linodyn contributors",
    description="Linode Dynamic DNS record synchronizer",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="GPL-3.0-or-later",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GNU General Public License v3 or later "
        "(GPLv3+)",
        "Topic :: Internet :: Name Service (DNS)",
    ],

    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests",
        "importlib_metadata; python_version<'3.10'",
    ],
    python_requires=">=3.7",
    extras_require={
        "test": [
            "flake8",
            "pytest",
            "pytest-cov",
            "pytest-mock",
            "requests-mock",
        ]
    },

    entry_points={
        "console_scripts": [
            "linodyn=linodyn.main:main",
        ],
    },
)
