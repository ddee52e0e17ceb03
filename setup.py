from setuptools import setup, find_namespace_packages  # type: ignore

setup(
    name="permcalc",
    version="0.1.0",
    author="Leo Developer",
    author_email="git@leodev.xyz",
    description="guild and channel permission calculator",
    packages=find_namespace_packages(include=["permcalc*"]),
    package_data={"permcalc": ["py.typed"]},
    python_requires=">=3.10",
    install_requires=["hikari", "attrs", "python-dotenv"],
    extras_require={"test": ["pytest"]},
)
