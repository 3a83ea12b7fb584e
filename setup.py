import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="accelspec",
    version="0.1.0",
    description="Velocity/displacement, Fourier spectra and SDOF response spectra of ground-acceleration records",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Physics",
        "Intended Audience :: Science/Research",
    ],
    packages=setuptools.find_packages(exclude=["tests", "tests.*", "examples"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy>=1.6.0",
        "numba",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
