# noise_field.py
"""
Procedural 2D simplex noise used to steer the flow field.

This module defines the NoiseField class, an explicitly constructed and
immutable noise source. The hot kernel is JIT-compiled with Numba and works
on a pre-shuffled permutation table, so a field is fully described by that
table.
"""
import logging
import numpy as np
from numba import jit
from typing import Optional, Union

from constants import NOISE_SCALE, PERMUTATION_SIZE

# --- Data Contracts ---
#
# class NoiseField:
#   - __init__(self, rng: Optional[Union[np.random.Generator, int]] = None):
#     - Inputs:
#       - rng: A NumPy Generator, an integer seed, or None for a fresh
#         random permutation.
#     - Outputs: None
#     - Side Effects: Builds a read-only permutation table of 512 entries.
#     - Invariants:
#       - self.permutation[:256] is a permutation of 0..255.
#       - self.permutation[256:] == self.permutation[:256].
#
#   - sample(self, x: float, y: float) -> float:
#     - Outputs: float in [-1, 1], continuous in (x, y).
#
#   - sample_many(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
#     - Outputs: float64 array with the shape of xs, same values as sample().

# Skew and unskew factors for the 2D triangular grid.
F2 = 0.5 * (np.sqrt(3.0) - 1.0)
G2 = (3.0 - np.sqrt(3.0)) / 6.0

# Gradient directions. Only the x and y components take part in the 2D dot
# product; the table is kept in its 3D form so hashing stays modulo 12.
GRAD3 = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1]
], dtype=np.float64)
GRAD3.setflags(write=False)


@jit(nopython=True)
def _corner_contribution(grad3, gi, x, y):
    """(0.5 - d^2)^4 * (g . offset), or zero outside the corner's support."""
    t = 0.5 - x * x - y * y
    if t < 0.0:
        return 0.0
    t *= t
    return t * t * (grad3[gi, 0] * x + grad3[gi, 1] * y)


@jit(nopython=True)
def _simplex_2d(perm, grad3, xin, yin):
    """
    Numba-jitted 2D simplex noise for a single coordinate.
    """
    # Skew the input space to find the simplex cell
    s = (xin + yin) * F2
    i = int(np.floor(xin + s))
    j = int(np.floor(yin + s))

    # Unskew the cell origin back to input space
    t = (i + j) * G2
    x0 = xin - (i - t)
    y0 = yin - (j - t)

    # Lower or upper triangle of the cell
    if x0 > y0:
        i1 = 1
        j1 = 0
    else:
        i1 = 0
        j1 = 1

    x1 = x0 - i1 + G2
    y1 = y0 - j1 + G2
    x2 = x0 - 1.0 + 2.0 * G2
    y2 = y0 - 1.0 + 2.0 * G2

    ii = i & 255
    jj = j & 255
    gi0 = perm[ii + perm[jj]] % 12
    gi1 = perm[ii + i1 + perm[jj + j1]] % 12
    gi2 = perm[ii + 1 + perm[jj + 1]] % 12

    n0 = _corner_contribution(grad3, gi0, x0, y0)
    n1 = _corner_contribution(grad3, gi1, x1, y1)
    n2 = _corner_contribution(grad3, gi2, x2, y2)

    return NOISE_SCALE * (n0 + n1 + n2)


@jit(nopython=True)
def _simplex_2d_many(perm, grad3, xs, ys, out):
    """
    Numba-jitted loop evaluating the simplex kernel over flat arrays.
    """
    for k in range(xs.shape[0]):
        out[k] = _simplex_2d(perm, grad3, xs[k], ys[k])


def build_permutation(rng: np.random.Generator) -> np.ndarray:
    """Shuffles 0..255 and duplicates it so corner lookups never wrap."""
    base = rng.permutation(PERMUTATION_SIZE).astype(np.int64)
    perm = np.concatenate((base, base))
    perm.setflags(write=False)
    return perm


class NoiseField:
    """
    A seeded 2D simplex noise field with a fixed permutation table.
    """
    def __init__(self, rng: Optional[Union[np.random.Generator, int]] = None):
        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)
        self._perm = build_permutation(rng)
        logging.debug("NoiseField initialized with a fresh permutation table.")

    @property
    def permutation(self) -> np.ndarray:
        """Read-only view of the 512-entry permutation table."""
        return self._perm

    def sample(self, x: float, y: float) -> float:
        """
        Returns the noise value at (x, y), in the range [-1, 1].
        """
        return float(_simplex_2d(self._perm, GRAD3, float(x), float(y)))

    def sample_many(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Vectorised sample(). Accepts arrays of any matching shape.
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if xs.shape != ys.shape:
            raise ValueError(f"Coordinate shapes differ: {xs.shape} vs {ys.shape}")

        flat_x = np.ascontiguousarray(xs).ravel()
        flat_y = np.ascontiguousarray(ys).ravel()
        out = np.empty(flat_x.shape[0], dtype=np.float64)
        if flat_x.shape[0]:
            _simplex_2d_many(self._perm, GRAD3, flat_x, flat_y, out)
        return out.reshape(xs.shape)
