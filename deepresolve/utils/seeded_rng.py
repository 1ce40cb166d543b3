"""
I provide a thin RNG wrapper that seeds NumPy, plus the action draw
the continual re-solving agent needs. I also expose set_global_seed to
initialize global libraries for reproducible tests.

Key classes/functions: SeededRNG — per-instance seeded generator with .sample_index;
set_global_seed — one-shot seeding of the Python and NumPy global generators.

Inputs: integer seeds. Outputs: deterministic streams of random numbers. Invariants: I
always coerce seeds to int.
"""

import random
import numpy as _np


class SeededRNG:
	def __init__(
		self,
		seed
	):
		self.seed = int(seed)
		self._np = _np.random.default_rng(int(self.seed))

	def sample_index(
		self,
		probs
	):
		p = _np.asarray(probs, dtype=float)
		s = float(p.sum())
		if s <= 0.0:
			raise ValueError("ProbabilityMassZero")
		return int(self._np.choice(len(p), p=p / s))


def set_global_seed(
	seed
):
	s = int(seed)
	random.seed(s)
	_np.random.seed(s)
	return s
