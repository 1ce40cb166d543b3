"""
I run vectorised counterfactual regret minimisation over a public tree built by
LookaheadTreeBuilder. Every node holds one row per player of reach-weighted ranges over
all private hands, so one depth-first pass updates every information set of the tree.

Key class: TreeCFR. Key methods: run — seed the root ranges and perform the configured
number of sequential passes; iterate — one recursive pass below a node;
_fill_cf_values_for_terminal_node — fold/showdown values from TerminalEquity scaled by
the pot; _fill_chance_ranges_and_strategy / _fill_players_ranges_and_strategy — child
ranges; _compute_regrets, _update_regrets, _update_average_strategy — the learning
step; _get_terminal_equity — per-board evaluator cache owned by this instance.
Key function: regret_matching.

Inputs: a root Node, 2xH starting ranges, iteration and burn-in counts, and optionally a
callback that refreshes the root opponent range from the previous pass (CFR-D gadget).
Outputs: none; results are left on the nodes (strategy, cf_values, cf_values_avg).

Invariants: every stored regret is >= regret_epsilon, so regret matching never divides
by zero; chance nodes never learn; the average strategy is untouched during burn-in.
A regret below the floor or a matrix whose shape disagrees with the node is an
implementation bug and raises RuntimeError. Caller misuse raises ValueError.
"""

from typing import Callable, Dict, Optional, Tuple
import numpy as np

from deepresolve.constants import P1, P2, CHANCE, PLAYERS_COUNT, REGRET_EPSILON
from deepresolve.engine.card_tools import CardTools
from deepresolve.engine.node import Node
from deepresolve.engine.public_state import TerminalKind
from deepresolve.solving.terminal_equity import TerminalEquity


def regret_matching(regrets: np.ndarray) -> np.ndarray:
	regrets_sum = regrets.sum(axis=0, keepdims=True)
	return regrets / regrets_sum


class TreeCFR:
	def __init__(
	 self,
	 terminal_equity_factory: Optional[Callable] = None,
	 card_tools: CardTools = None,
	 regret_epsilon: float = REGRET_EPSILON,
	 debug: bool = False,
	):
		if card_tools is not None:
			self.card_tools = card_tools
		else:
			self.card_tools = CardTools()
		if terminal_equity_factory is not None:
			self._terminal_equity_factory = terminal_equity_factory
		else:
			self._terminal_equity_factory = self._default_terminal_equity
		self.regret_epsilon = float(regret_epsilon)
		self.debug = bool(debug)
		self.cfr_skip_iters = 0
		self.hand_count = None
		self._cached_terminal_equities: Dict[Tuple[int, ...], object] = {}

	def _default_terminal_equity(self, board):
		return TerminalEquity(self.card_tools).set_board(board)

	def cache_size(self) -> int:
		return len(self._cached_terminal_equities)

	def run(
	 self,
	 root: Node,
	 starting_ranges,
	 iteration_count: int,
	 burn_in_count: int,
	 opponent_range_fn: Optional[Callable] = None,
	) -> None:
		ranges = np.array(starting_ranges, dtype=float)
		if ranges.size == 0:
			raise ValueError("EmptyStartingRanges")
		if (ranges.ndim != 2) or (ranges.shape[0] != PLAYERS_COUNT):
			raise ValueError("RangesShapeInvalid")
		iters = int(iteration_count)
		skip = int(burn_in_count)
		if skip < 0:
			raise ValueError("BurnInNegative")
		if iters < skip:
			raise ValueError("BurnInExceedsIterations")

		self.cfr_skip_iters = skip
		self.hand_count = int(ranges.shape[1])
		root.ranges = ranges

		opponent = None
		if opponent_range_fn is not None:
			if not root.is_decision:
				raise ValueError("RootNotDecisionNode")
			opponent = 1 - root.acting

		t = 0
		while t < iters:
			if (opponent is not None) and (t > 0):
				previous_cfv = root.cf_values[opponent, :].copy()
				new_range = np.asarray(opponent_range_fn(previous_cfv, t), dtype=float)
				if new_range.shape != (self.hand_count,):
					raise ValueError("RangesShapeInvalid")
				root.ranges[opponent, :] = new_range
			self.iterate(root, t)
			t += 1

	def iterate(self, node: Node, iteration: int) -> None:
		if node.acting not in (P1, P2, CHANCE):
			raise RuntimeError("InvalidActingPlayer")
		if (node.ranges is None) or (node.ranges.shape != (PLAYERS_COUNT, self.hand_count)):
			raise RuntimeError("ShapeMismatch")

		if node.is_terminal:
			self._fill_cf_values_for_terminal_node(node)
		else:
			self._fill_cf_values_for_non_terminal_node(node, iteration)

		if iteration >= self.cfr_skip_iters:
			self._accumulate_average_cfv(node)

	def _fill_cf_values_for_terminal_node(self, node: Node) -> None:
		term_equity = self._get_terminal_equity(node)
		values = np.zeros((PLAYERS_COUNT, self.hand_count), dtype=float)

		if node.terminal_kind == TerminalKind.FOLD:
			if node.acting not in (P1, P2):
				raise RuntimeError("InvalidActingPlayer")
			folding_player = 1 - node.acting
			term_equity.fold_value(node.ranges, values, folding_player)
		else:
			if node.terminal_kind == TerminalKind.SHOWDOWN:
				term_equity.call_value(node.ranges, values)
			else:
				raise RuntimeError("UnknownTerminalKind")

		node.cf_values = values * node.pot

	def _fill_cf_values_for_non_terminal_node(self, node: Node, iteration: int) -> None:
		actions_count = len(node.children)
		if actions_count == 0:
			raise RuntimeError("DecisionNodeWithoutChildren")

		if node.acting == CHANCE:
			current_strategy, children_ranges = self._fill_chance_ranges_and_strategy(node)
		else:
			current_strategy, children_ranges = self._fill_players_ranges_and_strategy(node)

		# [players, actions, hands]
		cf_values_allactions = np.zeros((PLAYERS_COUNT, actions_count, self.hand_count), dtype=float)

		i = 0
		while i < actions_count:
			child = node.children[i]
			child.ranges = children_ranges[:, i, :].copy()
			self.iterate(child, iteration)
			cf_values_allactions[:, i, :] = child.cf_values
			i += 1

		node.cf_values = np.zeros((PLAYERS_COUNT, self.hand_count), dtype=float)

		if node.acting == CHANCE:
			node.cf_values[P1, :] = cf_values_allactions[P1].sum(axis=0)
			node.cf_values[P2, :] = cf_values_allactions[P2].sum(axis=0)
		else:
			current_regrets = self._compute_regrets(node, current_strategy, cf_values_allactions)
			self._update_regrets(node, current_regrets)
			self._update_average_strategy(node, current_strategy, iteration)

	def _fill_chance_ranges_and_strategy(self, node: Node):
		actions_count = len(node.children)
		current_strategy = node.strategy
		if (current_strategy is None) or (current_strategy.shape != (actions_count, self.hand_count)):
			raise RuntimeError("ShapeMismatch")

		children_ranges = np.empty((PLAYERS_COUNT, actions_count, self.hand_count), dtype=float)
		children_ranges[P1] = current_strategy * node.ranges[P1, :].reshape(1, -1)
		children_ranges[P2] = current_strategy * node.ranges[P2, :].reshape(1, -1)
		return current_strategy, children_ranges

	def _fill_players_ranges_and_strategy(self, node: Node):
		current_player = node.acting
		opponent = 1 - current_player
		actions_count = len(node.children)

		if node.regrets is None:
			node.regrets = np.full((actions_count, self.hand_count), self.regret_epsilon, dtype=float)
		if node.regrets.shape != (actions_count, self.hand_count):
			raise RuntimeError("ShapeMismatch")
		if not np.all(node.regrets >= self.regret_epsilon):
			raise RuntimeError("RegretFloorViolated")

		current_strategy = regret_matching(node.regrets)

		children_ranges = np.empty((PLAYERS_COUNT, actions_count, self.hand_count), dtype=float)
		children_ranges[current_player] = current_strategy * node.ranges[current_player, :].reshape(1, -1)
		children_ranges[opponent] = np.tile(node.ranges[opponent, :], (actions_count, 1))
		return current_strategy, children_ranges

	def _compute_regrets(self, node: Node, current_strategy: np.ndarray, cf_values_allactions: np.ndarray) -> np.ndarray:
		current_player = node.acting
		opponent = 1 - current_player

		# opponent range is the same in every branch, so its values add up
		node.cf_values[opponent, :] = cf_values_allactions[opponent].sum(axis=0)

		player_cf_values = cf_values_allactions[current_player]
		node.cf_values[current_player, :] = (current_strategy * player_cf_values).sum(axis=0)

		return player_cf_values - node.cf_values[current_player, :].reshape(1, -1)

	def _update_regrets(self, node: Node, current_regrets: np.ndarray) -> None:
		node.regrets += current_regrets
		np.maximum(node.regrets, self.regret_epsilon, out=node.regrets)

	def _update_average_strategy(self, node: Node, current_strategy: np.ndarray, iteration: int) -> None:
		if iteration < self.cfr_skip_iters:
			return
		actions_count = len(node.children)
		if node.strategy is None:
			node.strategy = np.zeros((actions_count, self.hand_count), dtype=float)
		if node.iter_weight_sum is None:
			node.iter_weight_sum = np.zeros(self.hand_count, dtype=float)

		iter_weight_contribution = np.maximum(node.ranges[node.acting, :], self.regret_epsilon)
		node.iter_weight_sum += iter_weight_contribution
		iter_weight = (iter_weight_contribution / node.iter_weight_sum).reshape(1, -1)

		node.strategy *= (1.0 - iter_weight)
		node.strategy += current_strategy * iter_weight

	def _accumulate_average_cfv(self, node: Node) -> None:
		node.cfv_iterations += 1
		if node.cf_values_avg is None:
			node.cf_values_avg = node.cf_values.copy()
		else:
			node.cf_values_avg += (node.cf_values - node.cf_values_avg) / float(node.cfv_iterations)

	def _get_terminal_equity(self, node: Node):
		key = tuple(node.board)
		cached = self._cached_terminal_equities.get(key, None)
		if cached is None:
			cached = self._terminal_equity_factory(key)
			self._cached_terminal_equities[key] = cached
			if self.debug:
				print(f"[CACHE] terminal equity built for board {key}")
		return cached
