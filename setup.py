from setuptools import setup, find_packages
import os

library_name = "tsfilt"


def read_version():
    this_dir = os.path.abspath(os.path.dirname(__file__))
    with open(os.path.join(this_dir, library_name, "VERSION.txt")) as f:
        return f.read().strip()


setup(
    name=library_name,
    version=read_version(),
    description="Block-wise and FFT-based ARMA filtering of multi-channel time series with PyTorch",
    packages=find_packages(include=[library_name, f"{library_name}.*"]),
    package_data={library_name: ["VERSION.txt"]},
    python_requires=">=3.11",
    install_requires=["torch"],
    extras_require={"test": ["pytest", "numpy", "scipy"]},
)
