[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "horus_nav"
version = "0.1.0"
description = "Voxel mapping, A* local path planning and pure-pursuit trajectory control for small drones"
requires-python = ">=3.10"
dependencies = []
keywords = ["drone", "voxel", "path planning", "a-star", "occupancy grid", "pure pursuit", "robotics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["horus_nav"]

[tool.pytest.ini_options]
addopts = "-ra"
