"""
LookaheadTreeBuilder tests on real Leduc states: child order, chance probabilities,
fold bookkeeping, and the street-limited variant.
"""

import itertools

import numpy as np
import pytest

from deepresolve.constants import P1, P2, CHANCE
from deepresolve.engine.action_type import ActionType
from deepresolve.engine.card_tools import HAND_COUNT
from deepresolve.engine.public_state import PublicState, TerminalKind
from deepresolve.solving.lookahead_tree import LookaheadTreeBuilder


def _street_two_state(board=(2,), bets=(300, 300), player=P1):
	return PublicState(street=2, board=board, current_player=player, bets=bets)


def _parents(root):
	out = []
	for n in root.iter_nodes():
		for c in n.children:
			out.append((n, c))
	return out


def test_root_children_follow_action_menu_order():
	"""Children of the game root are check, pot bet, all-in, in that order."""
	root = LookaheadTreeBuilder().build(PublicState.initial())
	assert root.acting == P1
	assert root.actions == [ActionType.CALL, ActionType.POT_SIZED_BET, ActionType.ALL_IN]
	assert root.children[0].acting == P2
	assert root.children[1].pot == 100


def test_full_tree_stats_count_every_street_one_closing():
	"""Street one closes into a chance event after five distinct betting lines; street two has no chance nodes."""
	builder = LookaheadTreeBuilder()
	root = builder.build(PublicState.initial())
	stats = builder.tree_stats(root)
	assert stats["chance"] == 5
	assert stats["decision"] > 0
	assert stats["fold"] > 0
	assert stats["showdown"] > 0
	for n in root.iter_nodes():
		if n.is_chance:
			assert len(n.children) == HAND_COUNT
			assert n.board == ()
			for c in n.children:
				assert len(c.board) == 1
				assert c.acting == P1


def test_chance_probabilities_cover_each_hand_pair_once():
	"""For any two different private cards, the boards they leave possible carry total probability one."""
	root = LookaheadTreeBuilder().build(PublicState.initial().update_state(ActionType.CALL))
	chance = root.children[0]
	assert chance.is_chance
	assert chance.strategy.shape == (HAND_COUNT, HAND_COUNT)
	for i, j in itertools.permutations(range(HAND_COUNT), 2):
		total = 0.0
		for k, child in enumerate(chance.children):
			if (i not in child.board) and (j not in child.board):
				total += chance.strategy[k, i]
		assert total == pytest.approx(1.0)
	for k in range(HAND_COUNT):
		assert chance.strategy[k, k] == 0.0


def test_fold_terminals_store_the_non_folding_player():
	"""A fold edge leaves the opponent of the player who folded as the terminal's acting player."""
	root = LookaheadTreeBuilder().build(_street_two_state())
	seen = 0
	for parent, child in _parents(root):
		if child.is_terminal and (child.terminal_kind == TerminalKind.FOLD):
			assert child.action == ActionType.FOLD
			assert child.acting == 1 - parent.acting
			seen += 1
	assert seen > 0


def test_street_limit_turns_chance_events_into_showdowns():
	"""With street_limit the street-one closings become showdown leaves on the empty board."""
	builder = LookaheadTreeBuilder(street_limit=True)
	root = builder.build(PublicState.initial())
	stats = builder.tree_stats(root)
	assert stats["chance"] == 0
	for n in root.iter_nodes():
		assert n.board == ()
	cut = root.children[0].children[0]
	assert cut.is_terminal
	assert cut.terminal_kind == TerminalKind.SHOWDOWN
	assert cut.acting == CHANCE


def test_bet_fractions_widen_the_menu():
	"""Adding a half-pot size adds one more child at the street-two root."""
	narrow = LookaheadTreeBuilder(bet_fractions=[1.0]).build(_street_two_state(bets=(100, 100)))
	wide = LookaheadTreeBuilder(bet_fractions=[0.5, 1.0]).build(_street_two_state(bets=(100, 100)))
	assert len(wide.children) == len(narrow.children) + 1
	assert ActionType.HALF_POT_BET in wide.actions
	assert np.all([c.depth == 1 for c in wide.children])


def test_terminal_state_builds_a_single_leaf():
	"""A terminal public state yields a leaf root without children."""
	ps = PublicState.initial().update_state(ActionType.ALL_IN).update_state(ActionType.FOLD)
	root = LookaheadTreeBuilder().build(ps)
	assert root.is_terminal
	assert root.children == []
