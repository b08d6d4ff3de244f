# ekfcal

Building blocks for an extended Kalman filter that estimates a moving body's
state while it calibrates the sensors mounted on it. These sensors are IMUs,
cameras, GPS antennas and fiducial boards. The package provides quaternion
math, state containers with error-state corrections, the matrix helpers a
square-root filter needs, covariance augmentation for camera frames,
geodetic conversions with GPS frame alignment, and CSV logging.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `ekfcal.quaternion`: `Quaternion`, a frozen dataclass with `w, x, y, z`.
  You can compose two quaternions with `*`. Multiplying a quaternion by a
  3-vector rotates the vector. It also has `rotate`, `slerp`, `inverse`,
  `normalized`, `norm`, `to_rotation_matrix` and `to_rotation_vector`, and
  the constructors `identity`, `from_axis_angle` and `from_rotation_vector`.
- `ekfcal.linalg`: `qr_r` gives the upper-triangular R of a stacked QR
  decomposition. `skew_symmetric` builds a cross-product matrix.
  `insert_in_matrix` and `remove_from_matrix` add or remove rows and columns
  of a covariance.
- `ekfcal.types`: the state containers `BodyState`, `ImuState`, `GpsState`,
  `CamState`, `FidState`, `AugState`, `State` and `Intrinsics`, and the
  enums `SensorType`, `AugmentationType` and `GpsInitType`. Each state has a
  `to_vector()` method. `BodyState`, `ImuState` and `State` accept
  error-state vectors through `+=`. `State` also accepts another `State`.
  `add_to_imu_states`, `add_to_cam_states` and `add_to_aug_states` apply a
  vector to a mapping or list of states.
- `ekfcal.augmentation`: `augment_covariance` clones the body position and
  orientation block into a new augmented state, in normal or square-root
  form. `find_frame_aug_state` looks up a frame's clone.
  `interpolate_aug_state` interpolates a pose between clones.
- `ekfcal.gps_init`: WGS84 conversions `lla_to_ecef`, `ecef_to_lla`,
  `ecef_to_enu` and `enu_to_lla`. There are also `average_vectors`,
  `maximum_distance`, a planar point-set alignment `kabsch_2d` and
  `affine_angle`. `GpsInitializer` collects GPS fixes. Once its
  `GpsInitType` criterion is met, it returns a `GpsReference` that anchors
  the local frame.
- `ekfcal.ekf_log`: `CsvLogger` has optional rate limiting. The row and
  header builders are `body_state_header`, `aug_state_header`,
  `body_state_row` and `aug_state_row`.

## Example

```python
import numpy as np

from ekfcal.augmentation import augment_covariance
from ekfcal.quaternion import Quaternion
from ekfcal.types import BodyState, ImuState, State

state = State()
state.imu_states[1] = ImuState(is_intrinsic=True)
print(state.state_size())          # 15

correction = np.zeros(15)
correction[0:3] = [0.1, 0.0, 0.0]  # body position
correction[9:12] = [0.01, 0.0, 0.0]  # accelerometer bias
state += correction

q = Quaternion.from_axis_angle([0, 0, 1], np.pi / 2)
print(q * np.array([1.0, 0.0, 0.0]))  # about [0, 1, 0]

cov = np.eye(15) * 1e-2
print(augment_covariance(cov, 15, use_root_covariance=False).shape)  # (21, 21)
```

## What the package does not do

The package has no filter object of its own. It does not register sensors,
run a prediction step or run a measurement update, and it does not fuse
several IMU streams into one. It provides no command-line program and no
simulation. The modules above are the pieces such a filter is built from.
`CsvLogger` writes nothing unless it is created with `enabled=True`.