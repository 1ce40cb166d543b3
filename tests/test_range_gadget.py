"""CFRDGadget tests: first-step behaviour, board masking, and the follow probabilities staying in [0, 1]."""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from deepresolve.constants import GADGET_EPSILON
from deepresolve.engine.card_tools import HAND_COUNT
from deepresolve.solving.range_gadget import CFRDGadget


def test_first_step_follows_where_terminating_is_worse():
	"""With zero current values, hands whose carried-forward CFV is negative follow; positive ones split evenly."""
	cfv = np.array([-2.0, 3.0, -1.0, 0.5, -4.0, 1.0])
	g = CFRDGadget((), cfv)
	r = g.compute_opponent_range(np.zeros(HAND_COUNT), 0)
	for h in range(HAND_COUNT):
		if cfv[h] < 0.0:
			assert r[h] == pytest.approx(1.0, abs=1e-6)
		else:
			assert r[h] == pytest.approx(0.5)
	assert g.steps == 1
	np.testing.assert_allclose(g.get(), r)


def test_following_pays_more_than_terminating():
	"""When the re-solve already gives every hand more than its bound, the gadget follows with every hand."""
	g = CFRDGadget((), np.ones(HAND_COUNT))
	r = g.compute_opponent_range(np.full(HAND_COUNT, 5.0), 1)
	np.testing.assert_allclose(r, 1.0, atol=1e-6)


def test_board_blocked_hands_get_zero_mass():
	"""A hand that collides with the board never enters the reconstructed range."""
	g = CFRDGadget((4,), -np.ones(HAND_COUNT))
	r = g.compute_opponent_range(np.zeros(HAND_COUNT), 0)
	assert r[4] == 0.0
	assert np.all(r[[0, 1, 2, 3, 5]] > 0.99)


def test_shape_checks():
	"""Carried-forward and current CFVs must both be length-H vectors."""
	with pytest.raises(ValueError):
		CFRDGadget((), np.zeros(3))
	g = CFRDGadget((), np.zeros(HAND_COUNT))
	with pytest.raises(ValueError):
		g.compute_opponent_range(np.zeros(HAND_COUNT + 1), 0)


@settings(deadline=None, max_examples=60)
@given(
 bound=st.lists(st.floats(min_value=-100.0, max_value=100.0), min_size=HAND_COUNT, max_size=HAND_COUNT),
 steps=st.lists(
  st.lists(st.floats(min_value=-100.0, max_value=100.0), min_size=HAND_COUNT, max_size=HAND_COUNT),
  min_size=1,
  max_size=6,
 ),
)
def test_follow_probabilities_stay_in_unit_interval(bound, steps):
	"""Whatever values arrive, regrets stay floored and the range stays within [0, 1]."""
	g = CFRDGadget((0,), np.array(bound))
	for i, cur in enumerate(steps):
		r = g.compute_opponent_range(np.array(cur), i)
		assert np.all(r >= 0.0)
		assert np.all(r <= 1.0 + 1e-12)
		assert r[0] == 0.0
		assert np.all(g.play_regrets >= GADGET_EPSILON)
		assert np.all(g.terminate_regrets >= GADGET_EPSILON)
	assert g.steps == len(steps)
