"""CSV logging of filter body and augmented states."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np

from .types import BODY_STATE_SIZE, BodyState


def _enumerate_header(name: str, count: int) -> list[str]:
    return [f"{name}_{i}" for i in range(count)]


def _fmt(value) -> str:
    return repr(float(value))


def _quaternion_fields(quaternion) -> list[str]:
    return [_fmt(v) for v in (quaternion.w, quaternion.x, quaternion.y, quaternion.z)]


def body_state_header() -> str:
    fields = ["time"]
    fields += _enumerate_header("body_pos", 3)
    fields += _enumerate_header("body_vel", 3)
    fields += _enumerate_header("body_ang_pos", 4)
    fields += _enumerate_header("body_cov", BODY_STATE_SIZE)
    fields += _enumerate_header("duration", 1)
    return ",".join(fields)


def aug_state_header() -> str:
    fields = ["time"]
    fields += _enumerate_header("aug_pos", 3)
    fields += _enumerate_header("aug_ang", 4)
    return ",".join(fields)


def body_state_row(time: float, body_state: BodyState, body_cov, execution_count: int) -> str:
    """One body-state log line: time, position, velocity, orientation, covariance, duration."""
    fields = [_fmt(time)]
    fields += [_fmt(v) for v in np.asarray(body_state.pos_b_in_l, dtype=float).reshape(3)]
    fields += [_fmt(v) for v in np.asarray(body_state.vel_b_in_l, dtype=float).reshape(3)]
    fields += _quaternion_fields(body_state.ang_b_to_l)
    fields += [_fmt(v) for v in np.asarray(body_cov, dtype=float).reshape(-1)]
    fields.append(str(int(execution_count)))
    return ",".join(fields)


def aug_state_row(time: float, body_state: BodyState) -> str:
    """One augmentation log line: time, position and orientation."""
    fields = [_fmt(time)]
    fields += [_fmt(v) for v in np.asarray(body_state.pos_b_in_l, dtype=float).reshape(3)]
    fields += _quaternion_fields(body_state.ang_b_to_l)
    return ",".join(fields)


class CsvLogger:
    """Appends rows to a CSV file, writing the header before the first row.

    Nothing is written while ``enabled`` is false. With a positive ``rate``,
    :meth:`rate_limited_log` keeps at most one row per ``1 / rate`` seconds.
    """

    def __init__(
        self,
        directory: str | Path,
        filename: str,
        header: str = "",
        enabled: bool = False,
        rate: float = 0.0,
    ) -> None:
        self.path = Path(directory) / filename
        self.header = header
        self.enabled = enabled
        self.rate = rate
        self._started = False
        self._last_time: Optional[float] = None

    def log(self, row: str) -> None:
        if not self.enabled:
            return
        mode = "a"
        if not self._started:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            mode = "w"
        with self.path.open(mode, encoding="utf-8") as stream:
            if not self._started and self.header:
                stream.write(self.header + "\n")
            stream.write(row + "\n")
        self._started = True

    def rate_limited_log(self, row: str, time: float) -> None:
        if not self.enabled:
            return
        if self.rate > 0.0 and self._last_time is not None:
            if time - self._last_time < 1.0 / self.rate:
                return
        self._last_time = time
        self.log(row)