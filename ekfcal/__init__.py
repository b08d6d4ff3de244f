"""Quaternions, state containers, covariance augmentation, GPS alignment and logging for EKF calibration."""

__version__ = "0.1.0"