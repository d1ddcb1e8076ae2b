"""
Seeded 3D simplex noise.

This module implements:
- Simplex noise over a 3D lattice, hashed through an 8-entry bit table
- Fractal (multi-octave) coherent noise
- Whole-grid sampling for the generation passes

All evaluation is vectorized with NumPy; scalar inputs return a ``float``.
"""

from typing import Sequence, Union

import numpy as np

from .alea_prng import AleaPRNG, Seed, derive_prng

ONE_THIRD = 1.0 / 3.0
ONE_SIXTH = 1.0 / 6.0

ArrayLike = Union[float, np.ndarray]


class SimplexNoise:
    """
    Coherent noise generator.

    Each instance owns its own table; there is no shared state between
    instances, and the output is a pure function of the table and the inputs.
    """

    TABLE_SIZE = 8

    def __init__(self, seed: Union[Seed, Sequence[int]] = 0):
        """
        Initialize the noise generator.

        Args:
            seed: Integer or string seed, expanded into a table through the
                Alea PRNG, or a raw table of ``TABLE_SIZE`` integers
        """
        if isinstance(seed, (int, np.integer, str)):
            table = self._expand_seed(AleaPRNG(seed))
        else:
            table = [int(value) for value in seed]
            if len(table) != self.TABLE_SIZE:
                raise ValueError(
                    f"Noise table must have {self.TABLE_SIZE} entries, got {len(table)}"
                )

        self._table = np.asarray(table, dtype=np.int64)

    @classmethod
    def labelled(cls, seed: Seed, label: str) -> "SimplexNoise":
        """Create a generator for one labelled step of generation."""
        return cls(cls._expand_seed(derive_prng(seed, label)))

    @classmethod
    def _expand_seed(cls, prng: AleaPRNG):
        return [prng.next_uint32() >> 1 for _ in range(cls.TABLE_SIZE)]

    @property
    def table(self) -> np.ndarray:
        return self._table.copy()

    def coherent_noise(
        self,
        x: ArrayLike,
        y: ArrayLike,
        z: ArrayLike = 0.0,
        octaves: int = 1,
        multiplier: float = 25,
        amplitude: float = 0.5,
        lacunarity: float = 2.0,
        persistence: float = 0.9,
    ) -> ArrayLike:
        """
        Return the fractal noise value at a position.

        Args:
            x, y, z: Sample position, scalars or broadcastable arrays
            octaves: Number of layers summed; more layers add detail
            multiplier: Scale of the noise; larger values give larger features
            amplitude: Amplitude of the first layer
            lacunarity: Frequency multiple between layers
            persistence: Amplitude multiple between layers, usually < 1

        Returns:
            Noise value(s), ``float`` for scalar input
        """
        sx, sy, sz = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64) / multiplier,
            np.asarray(y, dtype=np.float64) / multiplier,
            np.asarray(z, dtype=np.float64) / multiplier,
        )

        value = np.zeros(sx.shape, dtype=np.float64)
        for _ in range(octaves):
            value += self._simplex(sx, sy, sz) * amplitude
            sx = sx * lacunarity
            sy = sy * lacunarity
            sz = sz * lacunarity
            amplitude *= persistence

        if value.ndim == 0:
            return float(value)
        return value

    def noise_grid(
        self, width: int, height: int, z: float = 0.0, **params
    ) -> np.ndarray:
        """
        Sample coherent noise at every integer cell of a grid.

        Returns:
            Array of shape ``(height, width)`` indexed ``[y, x]``
        """
        ys, xs = np.mgrid[0:height, 0:width]
        return np.asarray(self.coherent_noise(xs, ys, z, **params), dtype=np.float64)

    def _simplex(self, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
        # Skew into lattice space and find the containing cell
        s = (x + y + z) * ONE_THIRD
        i = np.floor(x + s).astype(np.int64)
        j = np.floor(y + s).astype(np.int64)
        k = np.floor(z + s).astype(np.int64)

        s = (i + j + k) * ONE_SIXTH
        u = x - i + s
        v = y - j + s
        w = z - k + s

        # Axes in order of decreasing offset pick the simplex corners
        hi = np.where(u >= w, np.where(u >= v, 0, 1), np.where(v >= w, 1, 2))
        lo = np.where(u < w, np.where(u < v, 0, 1), np.where(v < w, 1, 2))
        mid = 3 - hi - lo

        axes = np.arange(3)
        offset = np.zeros(u.shape + (3,), dtype=np.int64)
        total = self._corner(offset, i, j, k, u, v, w)
        for axis in (hi, mid, lo):
            offset = offset + (axes == axis[..., None])
            total += self._corner(offset, i, j, k, u, v, w)

        return total

    def _corner(self, offset, i, j, k, u, v, w) -> np.ndarray:
        a0 = offset[..., 0]
        a1 = offset[..., 1]
        a2 = offset[..., 2]

        s = (a0 + a1 + a2) * ONE_SIXTH
        cx = u - a0 + s
        cy = v - a1 + s
        cz = w - a2 + s
        t = 0.6 - cx * cx - cy * cy - cz * cz

        h = self._shuffle(i + a0, j + a1, k + a2)
        b5 = (h >> 5) & 1
        b4 = (h >> 4) & 1
        b3 = (h >> 3) & 1
        b2 = (h >> 2) & 1
        b1 = h & 3

        p = np.where(b1 == 1, cx, np.where(b1 == 2, cy, cz))
        q = np.where(b1 == 1, cy, np.where(b1 == 2, cz, cx))
        r = np.where(b1 == 1, cz, np.where(b1 == 2, cx, cy))

        p = np.where(b5 == b3, -p, p)
        q = np.where(b5 == b4, -q, q)
        r = np.where(b5 != (b4 ^ b3), -r, r)

        t2 = t * t
        gradient = p + np.where(b1 == 0, q + r, np.where(b2 == 0, q, r))
        return np.where(t < 0, 0.0, 8 * t2 * t2 * gradient)

    def _shuffle(self, i: np.ndarray, j: np.ndarray, k: np.ndarray) -> np.ndarray:
        return (
            self._bit_pattern(i, j, k, 0)
            + self._bit_pattern(j, k, i, 1)
            + self._bit_pattern(k, i, j, 2)
            + self._bit_pattern(i, j, k, 3)
            + self._bit_pattern(j, k, i, 4)
            + self._bit_pattern(k, i, j, 5)
            + self._bit_pattern(i, j, k, 6)
            + self._bit_pattern(j, k, i, 7)
        )

    def _bit_pattern(self, i, j, k, bit: int) -> np.ndarray:
        index = ((i >> bit) & 1) << 2 | ((j >> bit) & 1) << 1 | ((k >> bit) & 1)
        return self._table[index]
