from setuptools import setup, find_packages

setup(
    name="voxelcraft",
    version="0.1.0",
    packages=find_packages(exclude=["tests"]),
    install_requires=[
        "numpy>=1.20.0",
        "noise>=1.2.2",  # Perlin noise for terrain, biomes and resources
        "pygame>=2.0.0",  # World preview window and image export
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["voxelcraft=voxelcraft.__main__:main"],
    },
)
