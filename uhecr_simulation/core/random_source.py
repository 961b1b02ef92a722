"""
Explicit random number source.

Every stochastic operation receives a :class:`RandomSource` instead of using
module level random state. One stream must only ever be used by one
candidate history at a time; use :meth:`RandomSource.spawn` to derive
independent streams for parallel work.
"""

from __future__ import annotations

import base64
import json
from typing import List, Sequence

import numpy as np


class RandomSource:
    """Thin wrapper around :class:`numpy.random.Generator` (PCG64).

    Parameters
    ----------
    seed : int or numpy.random.SeedSequence, optional
        Seed of the stream. ``None`` draws fresh entropy from the OS.
    """

    def __init__(self, seed=None):
        if isinstance(seed, np.random.SeedSequence):
            self._seed_sequence = seed
        else:
            self._seed_sequence = np.random.SeedSequence(seed)
        self._generator = np.random.Generator(np.random.PCG64(self._seed_sequence))

    @property
    def generator(self) -> np.random.Generator:
        return self._generator

    def rand(self) -> float:
        """Uniform draw in [0, 1)."""
        return float(self._generator.random())

    def rand_uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.rand()

    def rand_exponential(self) -> float:
        """Unit-mean exponential draw via the inverse CDF, ``-ln(1 - u)``."""
        return -float(np.log1p(-self._generator.random()))

    def rand_bin(self, cdf: Sequence[float]) -> int:
        """Draw a bin index from an unnormalised cumulative distribution."""
        cdf = np.asarray(cdf, dtype=float)
        index = int(np.searchsorted(cdf, self.rand() * cdf[-1], side='right'))
        return min(index, len(cdf) - 1)

    def random_interpolated_position(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Uniformly distributed point on the segment from ``a`` to ``b``."""
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        return a + self.rand() * (b - a)

    def random_unit_vector(self) -> np.ndarray:
        z = self.rand_uniform(-1.0, 1.0)
        phi = self.rand_uniform(0.0, 2.0 * np.pi)
        r_xy = np.sqrt(max(0.0, 1.0 - z * z))
        return np.array([r_xy * np.cos(phi), r_xy * np.sin(phi), z], dtype=float)

    def spawn(self, n: int) -> List["RandomSource"]:
        """Create ``n`` statistically independent child streams."""
        return [RandomSource(child) for child in self._seed_sequence.spawn(n)]

    def describe_seed(self) -> str:
        """Root seed and spawn key; enough to rebuild the stream from its start."""
        return f"entropy={self._seed_sequence.entropy} spawn_key={tuple(self._seed_sequence.spawn_key)}"

    def get_seed_state(self) -> str:
        """Base64 encoded bit generator state (see :meth:`from_seed_state`)."""
        state = self._generator.bit_generator.state
        return base64.b64encode(json.dumps(state).encode('utf-8')).decode('ascii')

    @classmethod
    def from_seed_state(cls, encoded: str) -> "RandomSource":
        """Rebuild a stream that continues exactly where ``encoded`` was taken."""
        source = cls()
        state = json.loads(base64.b64decode(encoded.encode('ascii')).decode('utf-8'))
        source._generator.bit_generator.state = state
        return source
