"""Augmented-state covariance growth and pose lookup for camera frames."""

from __future__ import annotations

import dataclasses

import numpy as np

from .types import AUG_STATE_SIZE, AugState, BodyState


def augment_covariance(in_cov, index: int, use_root_covariance: bool) -> np.ndarray:
    """Insert a clone of the body position and orientation at ``index``.

    In square-root form only the upper-triangular part is carried over.
    """
    in_cov = np.atleast_2d(np.asarray(in_cov, dtype=float))
    in_rows, in_cols = in_cov.shape
    if not 0 <= index <= min(in_rows, in_cols):
        raise ValueError("augmentation index lies outside the covariance")
    size = AUG_STATE_SIZE
    out = np.zeros((in_rows + size, in_cols + size))
    moved = index + size

    out[:index, :index] = in_cov[:index, :index]
    out[:index, moved:] = in_cov[:index, index:]
    if not use_root_covariance:
        out[moved:, :index] = in_cov[index:, :index]
    out[moved:, moved:] = in_cov[index:, index:]

    if not use_root_covariance:
        out[index:index + 3, :] = out[0:3, :].copy()
        out[index + 3:index + 6, :] = out[6:9, :].copy()

    out[:, index:index + 3] = out[:, 0:3].copy()
    out[:, index + 3:index + 6] = out[:, 6:9].copy()

    out[index:index + 3, index:index + 3] = out[0:3, 0:3].copy()
    out[index + 3:index + 6, index + 3:index + 6] = out[6:9, 6:9].copy()

    if not use_root_covariance:
        out[index:index + 3, 0:3] = out[0:3, 0:3].copy()
        out[index + 3:index + 6, 6:9] = out[6:9, 6:9].copy()
    out[0:3, index:index + 3] = out[0:3, 0:3].copy()
    out[6:9, index + 3:index + 6] = out[6:9, 6:9].copy()
    return out


def find_frame_aug_state(aug_states, frame_id: int) -> AugState:
    """Copy of the last augmented state for ``frame_id``, or a default state if none."""
    found = AugState()
    for aug in aug_states:
        if aug.frame_id == frame_id:
            found = dataclasses.replace(aug)
    return found


def _fraction(time: float, start: float, end: float) -> float:
    span = end - start
    return (time - start) / span if span != 0.0 else 0.0


def interpolate_aug_state(
    aug_states, time: float, current_time: float, body_state: BodyState
) -> AugState:
    """Interpolate the body pose at ``time`` between augmented states.

    After the last augmented state the current body state is the far end.
    """
    augs = list(aug_states)
    if not augs:
        raise ValueError("no augmented states to interpolate between")

    last = augs[-1]
    if time < last.time:
        bracket = None
        for earlier, later in zip(augs, augs[1:]):
            if earlier.time <= time <= later.time:
                bracket = (earlier, later)
        if bracket is None:
            raise ValueError(f"time {time} precedes the first augmented state")
        state_0, state_1 = bracket
        alpha = _fraction(time, state_0.time, state_1.time)
        pos_1 = np.asarray(state_1.pos_b_in_l, dtype=float)
        ang_1 = state_1.ang_b_to_l
    else:
        state_0 = last
        alpha = _fraction(time, last.time, current_time)
        pos_1 = np.asarray(body_state.pos_b_in_l, dtype=float)
        ang_1 = body_state.ang_b_to_l

    pos_0 = np.asarray(state_0.pos_b_in_l, dtype=float)
    return AugState(
        time=time,
        pos_b_in_l=pos_0 + alpha * (pos_1 - pos_0),
        ang_b_to_l=state_0.ang_b_to_l.slerp(alpha, ang_1),
        index=state_0.index,
        alpha=alpha,
    )