[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ekfcal"
version = "0.1.0"
description = "Building blocks for an EKF that calibrates sensors: quaternions, state containers, covariance augmentation, GPS frame alignment and CSV logging"
requires-python = ">=3.10"
keywords = ["ekf", "kalman", "calibration", "imu", "quaternion", "gps", "sensor-fusion"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ekfcal"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
