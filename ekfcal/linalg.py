"""Matrix helpers for square-root Kalman filtering and state bookkeeping."""

from __future__ import annotations

import numpy as np


def qr_r(a, b) -> np.ndarray:
    """Upper-triangular R of the QR decomposition of ``a`` stacked over ``b``.

    The result is square with as many rows as ``a`` has columns, so that
    ``R.T @ R == a.T @ a + b.T @ b``.
    """
    a = np.atleast_2d(np.asarray(a, dtype=float))
    b = np.atleast_2d(np.asarray(b, dtype=float))
    if a.shape[1] != b.shape[1]:
        raise ValueError("matrices must have the same number of columns")
    cols = a.shape[1]
    stacked = np.vstack([a, b])
    r = np.linalg.qr(stacked, mode="r")
    out = np.zeros((cols, cols))
    rows = min(cols, r.shape[0])
    out[:rows, :] = r[:rows, :]
    return np.triu(out)


def skew_symmetric(vector) -> np.ndarray:
    """Cross-product matrix: ``skew_symmetric(a) @ b == cross(a, b)``."""
    x, y, z = np.asarray(vector, dtype=float).reshape(3)
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def insert_in_matrix(sub_matrix, matrix, row: int, col: int) -> np.ndarray:
    """Insert ``sub_matrix`` as new rows and columns at (``row``, ``col``).

    Existing entries at or beyond the insertion point move down and right;
    the new rows and columns are zero apart from the inserted block.
    """
    sub = np.atleast_2d(np.asarray(sub_matrix, dtype=float))
    mat = np.atleast_2d(np.asarray(matrix, dtype=float))
    rows, cols = mat.shape
    if not (0 <= row <= rows and 0 <= col <= cols):
        raise ValueError("insertion point lies outside the matrix")
    sub_rows, sub_cols = sub.shape
    out = np.zeros((rows + sub_rows, cols + sub_cols))
    row_keep = np.r_[0:row, row + sub_rows:rows + sub_rows]
    col_keep = np.r_[0:col, col + sub_cols:cols + sub_cols]
    out[np.ix_(row_keep, col_keep)] = mat
    out[row:row + sub_rows, col:col + sub_cols] = sub
    return out


def remove_from_matrix(matrix, row: int, col: int, size: int) -> np.ndarray:
    """Remove ``size`` rows starting at ``row`` and ``size`` columns at ``col``."""
    mat = np.atleast_2d(np.asarray(matrix, dtype=float))
    rows, cols = mat.shape
    if size < 0 or row < 0 or col < 0 or row + size > rows or col + size > cols:
        raise ValueError("removal range lies outside the matrix")
    out = np.delete(mat, np.s_[row:row + size], axis=0)
    return np.delete(out, np.s_[col:col + size], axis=1)