"""
TreeCFR tests (deterministic, small iteration counts).

StubEquity / CountingFactory:
A two-hand stand-in for TerminalEquity with hand-picked matrices, and a factory that
counts how often the engine asks for a new evaluator. They let the toy trees below be
solved by hand.
"""

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from deepresolve.constants import P1, P2, EPS_ZS, REGRET_EPSILON
from deepresolve.engine.action_type import ActionType
from deepresolve.engine.card_tools import CardTools
from deepresolve.engine.node import Node
from deepresolve.engine.public_state import PublicState, TerminalKind
from deepresolve.solving.lookahead_tree import LookaheadTreeBuilder
from deepresolve.solving.tree_cfr import TreeCFR, regret_matching


class StubEquity:
	"""Two hands: they always coexist; hand 1 beats hand 0 at showdown."""

	def __init__(self):
		self.fold_matrix = np.ones((2, 2))
		self.call_matrix = np.array([[0.0, -1.0], [1.0, 0.0]])

	def call_value(self, ranges, out):
		out[0, :] = self.call_matrix @ ranges[1, :]
		out[1, :] = self.call_matrix @ ranges[0, :]

	def fold_value(self, ranges, out, folding_player):
		out[0, :] = self.fold_matrix @ ranges[1, :]
		out[1, :] = self.fold_matrix @ ranges[0, :]
		out[int(folding_player), :] *= -1.0


class CountingFactory:
	def __init__(self):
		self.calls = []

	def __call__(self, board):
		self.calls.append(tuple(board))
		return StubEquity()


def _fold_or_call_tree():
	"""P1 either folds for a pot of 10 or calls into a showdown for a pot of 30."""
	root = Node(acting=P1, pot=10)
	root.children.append(Node(acting=P2, pot=10, is_terminal=True, terminal_kind=TerminalKind.FOLD, action=ActionType.FOLD, depth=1))
	root.children.append(Node(acting=P2, pot=30, is_terminal=True, terminal_kind=TerminalKind.SHOWDOWN, action=ActionType.CALL, depth=1))
	return root


def _uniform_ranges(h=2):
	return np.full((2, h), 1.0 / h)


def test_toy_tree_converges_to_fold_weak_call_strong():
	"""Hand 0 loses 15 by calling vs 10 by folding, hand 1 wins 15 by calling; the average strategy reflects that."""
	root = _fold_or_call_tree()
	cfr = TreeCFR(terminal_equity_factory=CountingFactory())
	cfr.run(root, _uniform_ranges(), 1000, 0)

	call = root.strategy[1, :]
	assert call[0] == pytest.approx(0.0, abs=0.02)
	assert call[1] == pytest.approx(1.0, abs=0.02)
	np.testing.assert_allclose(root.strategy.sum(axis=0), 1.0)


def test_regrets_stay_at_or_above_the_floor():
	"""After any number of passes every stored regret is at least the epsilon floor."""
	root = _fold_or_call_tree()
	cfr = TreeCFR(terminal_equity_factory=CountingFactory())
	cfr.run(root, _uniform_ranges(), 25, 0)
	assert np.all(root.regrets >= REGRET_EPSILON)
	assert root.regrets.shape == (2, 2)


def test_terminal_equity_is_built_once_per_board():
	"""Every terminal shares the empty board, so the factory runs once across all iterations."""
	factory = CountingFactory()
	cfr = TreeCFR(terminal_equity_factory=factory)
	cfr.run(_fold_or_call_tree(), _uniform_ranges(), 7, 2)
	assert factory.calls == [()]
	assert cfr.cache_size() == 1


def test_burn_in_keeps_average_strategy_and_values_empty():
	"""With the whole budget spent in burn-in there is no averaged strategy; otherwise only later passes count."""
	root = _fold_or_call_tree()
	TreeCFR(terminal_equity_factory=CountingFactory()).run(root, _uniform_ranges(), 3, 3)
	assert root.strategy is None
	assert root.cfv_iterations == 0
	assert root.cf_values is not None

	root = _fold_or_call_tree()
	TreeCFR(terminal_equity_factory=CountingFactory()).run(root, _uniform_ranges(), 5, 2)
	assert root.cfv_iterations == 3
	assert root.children[0].cfv_iterations == 3
	assert root.cf_values_avg.shape == (2, 2)


def test_run_rejects_bad_arguments():
	"""Empty ranges, a wrongly shaped ranges matrix, and a burn-in above the budget are caller errors."""
	cfr = TreeCFR(terminal_equity_factory=CountingFactory())
	with pytest.raises(ValueError):
		cfr.run(_fold_or_call_tree(), np.zeros((0,)), 3, 0)
	with pytest.raises(ValueError):
		cfr.run(_fold_or_call_tree(), np.zeros((3, 2)), 3, 0)
	with pytest.raises(ValueError):
		cfr.run(_fold_or_call_tree(), _uniform_ranges(), 3, 4)


def test_engine_invariant_violations_raise_runtime_error():
	"""A regret below the floor, a regret matrix of the wrong shape, a bad acting player, or a childless decision node."""
	cfr = TreeCFR(terminal_equity_factory=CountingFactory())

	root = _fold_or_call_tree()
	root.regrets = np.zeros((2, 2))
	with pytest.raises(RuntimeError, match="RegretFloorViolated"):
		cfr.run(root, _uniform_ranges(), 1, 0)

	root = _fold_or_call_tree()
	root.regrets = np.ones((3, 2))
	with pytest.raises(RuntimeError, match="ShapeMismatch"):
		cfr.run(root, _uniform_ranges(), 1, 0)

	with pytest.raises(RuntimeError, match="InvalidActingPlayer"):
		cfr.run(Node(acting=7, pot=1), _uniform_ranges(), 1, 0)

	with pytest.raises(RuntimeError, match="DecisionNodeWithoutChildren"):
		cfr.run(Node(acting=P1, pot=1), _uniform_ranges(), 1, 0)


def test_opponent_range_callback_sees_previous_root_values():
	"""The callback runs before every pass but the first, with the opponent's root CFVs of the pass before."""
	seen = []

	def fn(previous_cfv, t):
		seen.append((t, previous_cfv.copy()))
		return np.array([0.25, 0.75])

	root = _fold_or_call_tree()
	TreeCFR(terminal_equity_factory=CountingFactory()).run(root, _uniform_ranges(), 4, 0, opponent_range_fn=fn)
	assert [t for t, _ in seen] == [1, 2, 3]
	assert seen[0][1].shape == (2,)
	np.testing.assert_allclose(root.ranges[P2, :], [0.25, 0.75])

	leaf = Node(acting=P2, pot=1, is_terminal=True, terminal_kind=TerminalKind.SHOWDOWN)
	with pytest.raises(ValueError):
		TreeCFR(terminal_equity_factory=CountingFactory()).run(leaf, _uniform_ranges(), 2, 0, opponent_range_fn=fn)


def test_chance_node_splits_ranges_and_sums_values():
	"""Each dealt child receives the parent ranges times its outcome row; the chance node's CFVs are the sum."""
	ps = PublicState.initial().update_state(ActionType.CALL).update_state(ActionType.CALL)
	root = LookaheadTreeBuilder().build(ps)
	assert root.is_chance

	ct = CardTools()
	ranges = np.tile(ct.get_uniform_range(()), (2, 1))
	cfr = TreeCFR(card_tools=ct)
	cfr.run(root, ranges, 2, 0)

	total = np.zeros_like(root.cf_values)
	for k, child in enumerate(root.children):
		np.testing.assert_allclose(child.ranges, ranges * root.strategy[k, :].reshape(1, -1))
		total += child.cf_values
	np.testing.assert_allclose(root.cf_values, total)
	assert root.regrets is None
	assert cfr.cache_size() == len(root.children)


def test_every_node_is_zero_sum_under_its_own_ranges():
	"""On the full game tree, sum over players of range . CFV vanishes at every node after a pass."""
	ct = CardTools()
	root = LookaheadTreeBuilder(card_tools=ct).build(PublicState.initial())
	ranges = np.tile(ct.get_uniform_range(()), (2, 1))
	TreeCFR(card_tools=ct).run(root, ranges, 3, 0)
	for n in root.iter_nodes():
		total = float(n.ranges[P1] @ n.cf_values[P1] + n.ranges[P2] @ n.cf_values[P2])
		assert abs(total) < EPS_ZS * max(1.0, n.pot)


@settings(deadline=None, max_examples=60)
@given(
 regrets=st.lists(
  st.lists(st.floats(min_value=1e-9, max_value=1e3), min_size=4, max_size=4),
  min_size=2,
  max_size=5,
 )
)
def test_regret_matching_columns_are_distributions(regrets):
	"""Regret matching over floored regrets gives a probability distribution per hand."""
	s = regret_matching(np.array(regrets, dtype=float))
	assert np.all(s >= 0.0)
	np.testing.assert_allclose(s.sum(axis=0), 1.0)
