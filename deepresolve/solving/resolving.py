"""
I run one depth-limited re-solve at a public state and answer queries about it. I build
the lookahead tree with LookaheadTreeBuilder, seed the root ranges, run TreeCFR for the
configured budget, and read values and the averaged strategy back from the solved tree.

Key classes: ResolveResult — snapshot of one solve; Resolving. Key methods:
resolve_first_node — both root ranges fixed by the caller (true game root); resolve —
our range fixed, the opponent range rebuilt every iteration by CFRDGadget from the
opponent CFVs carried forward; get_possible_actions, get_root_cfv,
get_root_cfv_both_players, get_action_cfv, get_chance_action_cfv, get_action_strategy,
_action_to_action_id — queries over the last solve.

Inputs: a PublicState whose node is a player decision, length-H non-negative ranges,
opponent CFVs. Outputs: ResolveResult and query vectors (copies).

Invariants: the resolving player is the root's acting player; queries read the
iteration-averaged CFVs when any post-burn-in iteration ran and the last iteration's
otherwise; opponent CFVs returned for an action (or action plus board card) are
divided by our averaged reach into that branch relative to the root, so they are on the
scale of a root CFV and can seed the next resolve directly. Every query before a
successful solve raises RuntimeError("ResolveNotRun"); a failed solve clears the
previous results.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import numpy as np

from deepresolve.constants import PLAYERS_COUNT
from deepresolve.engine.action_type import ActionType
from deepresolve.engine.card_tools import CardTools
from deepresolve.engine.node import Node
from deepresolve.resolve_config import ResolveConfig
from deepresolve.solving.lookahead_tree import LookaheadTreeBuilder
from deepresolve.solving.range_gadget import CFRDGadget
from deepresolve.solving.tree_cfr import TreeCFR, regret_matching


@dataclass
class ResolveResult:
	actions: List[ActionType]
	strategy: np.ndarray
	root_cfv: np.ndarray
	root_cfv_both_players: np.ndarray
	children_cfvs: np.ndarray
	iterations: int
	skip_iterations: int


class Resolving:
	def __init__(
	 self,
	 config: ResolveConfig = None,
	 card_tools: CardTools = None,
	 tree_builder: LookaheadTreeBuilder = None,
	 terminal_equity_factory: Optional[Callable] = None,
	):
		if config is not None:
			self.config = config
		else:
			self.config = ResolveConfig.from_env()
		if card_tools is not None:
			self.card_tools = card_tools
		else:
			self.card_tools = CardTools()
		if tree_builder is not None:
			self.builder = tree_builder
		else:
			self.builder = LookaheadTreeBuilder(
			 card_tools=self.card_tools,
			 bet_fractions=self.config.bet_fractions,
			 include_all_in=self.config.include_all_in,
			 street_limit=self.config.street_limit,
			)
		self._terminal_equity_factory = terminal_equity_factory

		self._lookahead_tree: Optional[Node] = None
		self._cfr: Optional[TreeCFR] = None
		self._gadget: Optional[CFRDGadget] = None
		self._resolve_results: Optional[ResolveResult] = None
		self._player = None
		self._root_mass = 1.0

	def _create_lookahead_tree(self, state) -> Node:
		root = self.builder.build(state)
		if not root.is_decision:
			raise ValueError("RootNotDecisionNode")
		self._lookahead_tree = root
		return root

	def _check_range(self, range_vec) -> np.ndarray:
		r = np.array(range_vec, dtype=float)
		if r.shape != (self.card_tools.hand_count,):
			raise ValueError("RangeInvalid")
		if not np.all(np.isfinite(r)):
			raise ValueError("RangeInvalid")
		if np.any(r < 0.0):
			raise ValueError("RangeInvalid")
		return r

	def _new_cfr(self) -> TreeCFR:
		return TreeCFR(
		 terminal_equity_factory=self._terminal_equity_factory,
		 card_tools=self.card_tools,
		 regret_epsilon=self.config.regret_epsilon,
		 debug=self.config.debug,
		)

	def resolve_first_node(self, state, player_range, opponent_range) -> ResolveResult:
		self._resolve_results = None
		pr = self._check_range(player_range)
		orr = self._check_range(opponent_range)
		if float(pr.sum()) <= 0.0:
			raise ValueError("RangeMassZero")

		root = self._create_lookahead_tree(state)
		player = root.acting
		ranges = np.zeros((PLAYERS_COUNT, self.card_tools.hand_count), dtype=float)
		ranges[player, :] = pr
		ranges[1 - player, :] = orr

		iters = int(self.config.cfr_iters)
		skip = int(self.config.cfr_skip_iters)
		if self.config.debug:
			print(f"[INFO] resolve_first_node street={state.street} board={state.board} iters={iters} skip={skip}")

		self._gadget = None
		self._cfr = self._new_cfr()
		self._cfr.run(root, ranges, iters, skip)
		return self._finish(player, iters, skip)

	def resolve(
	 self,
	 state,
	 player_range,
	 opponent_cfv,
	 skip_iters: Optional[int] = None,
	 iters: Optional[int] = None,
	) -> ResolveResult:
		self._resolve_results = None
		pr = self._check_range(player_range)
		if float(pr.sum()) <= 0.0:
			raise ValueError("RangeMassZero")
		ocfv = np.array(opponent_cfv, dtype=float)
		if (ocfv.shape != (self.card_tools.hand_count,)) or (not np.all(np.isfinite(ocfv))):
			raise ValueError("OpponentCfvShapeInvalid")

		if iters is not None:
			n_iters = int(iters)
		else:
			n_iters = int(self.config.cfr_iters)
		if skip_iters is not None:
			n_skip = int(skip_iters)
		else:
			n_skip = min(int(self.config.cfr_skip_iters), n_iters)

		root = self._create_lookahead_tree(state)
		player = root.acting

		self._gadget = CFRDGadget(
		 root.board,
		 ocfv,
		 card_tools=self.card_tools,
		 regret_epsilon=self.config.gadget_epsilon,
		)
		opponent_range = self._gadget.compute_opponent_range(np.zeros_like(ocfv), 0)

		ranges = np.zeros((PLAYERS_COUNT, self.card_tools.hand_count), dtype=float)
		ranges[player, :] = pr
		ranges[1 - player, :] = opponent_range

		if self.config.debug:
			print(f"[INFO] resolve street={state.street} board={state.board} iters={n_iters} skip={n_skip}")

		self._cfr = self._new_cfr()
		self._cfr.run(
		 root,
		 ranges,
		 n_iters,
		 n_skip,
		 opponent_range_fn=self._gadget.compute_opponent_range,
		)
		return self._finish(player, n_iters, n_skip)

	def _finish(self, player: int, iters: int, skip: int) -> ResolveResult:
		root = self._lookahead_tree
		self._player = int(player)
		self._root_mass = float(root.ranges[player, :].sum())

		children_cfvs = np.zeros((len(root.children), self.card_tools.hand_count), dtype=float)
		i = 0
		while i < len(root.children):
			children_cfvs[i, :] = self._branch_opponent_cfv(root.children[i], i, None)
			i += 1

		if root.strategy is not None:
			strategy = root.strategy.copy()
		else:
			strategy = None

		self._resolve_results = ResolveResult(
		 actions=list(root.actions),
		 strategy=strategy,
		 root_cfv=self._node_cfv(root)[player, :].copy(),
		 root_cfv_both_players=self._node_cfv(root).copy(),
		 children_cfvs=children_cfvs,
		 iterations=int(iters),
		 skip_iterations=int(skip),
		)
		return self._resolve_results

	def _node_cfv(self, node: Node) -> np.ndarray:
		if (node.cf_values_avg is not None) and (node.cfv_iterations > 0):
			return node.cf_values_avg
		else:
			return node.cf_values

	def _root_strategy(self) -> np.ndarray:
		root = self._lookahead_tree
		if root.strategy is not None:
			return root.strategy
		else:
			return regret_matching(root.regrets)

	def _branch_opponent_cfv(self, node: Node, action_id: int, chance_row) -> np.ndarray:
		root = self._lookahead_tree
		reach = root.ranges[self._player, :] * self._root_strategy()[action_id, :]
		if chance_row is not None:
			reach = reach * chance_row
		branch_mass = float(reach.sum())
		if branch_mass <= 0.0:
			raise RuntimeError("BranchUnreachable")
		scale = self._root_mass / branch_mass
		return self._node_cfv(node)[1 - self._player, :] * scale

	def _require_solved(self) -> None:
		if (self._resolve_results is None) or (self._lookahead_tree is None):
			raise RuntimeError("ResolveNotRun")

	def get_possible_actions(self) -> List[ActionType]:
		self._require_solved()
		return list(self._lookahead_tree.actions)

	def get_root_cfv(self) -> np.ndarray:
		self._require_solved()
		return self._node_cfv(self._lookahead_tree)[self._player, :].copy()

	def get_root_cfv_both_players(self) -> np.ndarray:
		self._require_solved()
		return self._node_cfv(self._lookahead_tree).copy()

	def get_action_cfv(self, action) -> np.ndarray:
		action_id = self._action_to_action_id(action)
		child = self._lookahead_tree.children[action_id]
		return self._branch_opponent_cfv(child, action_id, None).copy()

	def get_chance_action_cfv(self, action, board) -> np.ndarray:
		action_id = self._action_to_action_id(action)
		child = self._lookahead_tree.children[action_id]

		chance_node = None
		if child.is_chance:
			chance_node = child
		else:
			if child.is_decision:
				for c in child.children:
					if (c.action == ActionType.CALL) and c.is_chance:
						chance_node = c
		if chance_node is None:
			raise ValueError("NoChanceAfterAction")

		b = tuple(int(c) for c in board)
		board_id = None
		i = 0
		while i < len(chance_node.children):
			if chance_node.children[i].board == b:
				board_id = i
			i += 1
		if board_id is None:
			raise ValueError("BoardNotFound")

		grandchild = chance_node.children[board_id]
		chance_row = chance_node.strategy[board_id, :]
		return self._branch_opponent_cfv(grandchild, action_id, chance_row).copy()

	def get_action_strategy(self, action) -> np.ndarray:
		action_id = self._action_to_action_id(action)
		return self._root_strategy()[action_id, :].copy()

	def _action_to_action_id(self, action) -> int:
		self._require_solved()
		if isinstance(action, ActionType):
			wanted = action
		else:
			wanted = ActionType(int(action))
		actions = self._lookahead_tree.actions
		i = 0
		while i < len(actions):
			if actions[i] == wanted:
				return i
			i += 1
		raise ValueError("IllegalAction")
