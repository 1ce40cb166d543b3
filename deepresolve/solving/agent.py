"""
I play one seat of a Leduc hand by re-solving at every one of our decisions
(continual re-solving). I never store a strategy for the whole game; instead I carry two
invariants from one decision to the next: our own range, narrowed by the averaged
strategy of each action we took, and an upper bound on the opponent's counterfactual
values, read back from the previous solve.

Key class: ContinualResolving. Key methods: resolve_first_node — solve the initial state
once with uniform ranges and keep P1's root CFVs; start_new_hand — reset per-hand
trackers for a seat and private card; compute_action — re-solve (or reuse the first
solve), sample an action for our hand, update the invariants.

Inputs: a ResolveConfig (iteration budget, game parameters, seed) and, per decision, the
PublicState at which we act. Outputs: the chosen ActionType.

Invariants: the first P1 decision reuses the first-node solve; the first P2 decision
uses P1's first-node root CFVs as the opponent bound; inside a street the bound comes
from get_action_cfv of our last action, across a street change from
get_chance_action_cfv with the new board, and our range is renormalized against the
board. Sampling uses SeededRNG, so a fixed seed gives a fixed sequence of actions.
"""

from typing import Optional
import numpy as np

from deepresolve.constants import P1, P2
from deepresolve.engine.action_type import ActionType
from deepresolve.engine.card_tools import CardTools
from deepresolve.engine.public_state import PublicState
from deepresolve.resolve_config import ResolveConfig
from deepresolve.solving.resolving import Resolving
from deepresolve.utils.seeded_rng import SeededRNG


class ContinualResolving:
	def __init__(self, config: ResolveConfig = None, card_tools: CardTools = None, seed: Optional[int] = None):
		if config is not None:
			self.config = config
		else:
			self.config = ResolveConfig.from_env()
		if card_tools is not None:
			self.card_tools = card_tools
		else:
			self.card_tools = CardTools()
		if seed is not None:
			self.rng = SeededRNG(seed)
		else:
			self.rng = SeededRNG(self.config.seed)

		self.starting_player_range = None
		self.first_node_resolving = None
		self.starting_cfvs_p1 = None
		self.resolve_first_node()

		self.position = None
		self.hand = None
		self.start_new_hand(P1, 0)

	def _new_resolving(self) -> Resolving:
		return Resolving(config=self.config, card_tools=self.card_tools)

	def initial_state(self) -> PublicState:
		return PublicState.initial(ante=self.config.ante, stack=self.config.stack)

	def resolve_first_node(self) -> None:
		first_node = self.initial_state()
		self.starting_player_range = self.card_tools.get_uniform_range(first_node.board)
		self.first_node_resolving = self._new_resolving()
		self.first_node_resolving.resolve_first_node(
		 first_node,
		 self.starting_player_range,
		 self.starting_player_range,
		)
		self.starting_cfvs_p1 = self.first_node_resolving.get_root_cfv()

	def start_new_hand(self, position: int, hand) -> None:
		if position not in (P1, P2):
			raise ValueError("PositionInvalid")
		if isinstance(hand, str):
			h = self.card_tools.string_to_card(hand)
		else:
			h = int(hand)
		if (h < 0) or (h >= self.card_tools.hand_count):
			raise ValueError("HandInvalid")
		self.position = int(position)
		self.hand = h
		self.decision_id = 0
		self.last_state = None
		self.last_action = None
		self.resolving = None
		self.current_player_range = None
		self.current_opponent_cfvs_bound = None

	def _resolve_node(self, state: PublicState) -> None:
		if (self.decision_id == 0) and (self.position == P1):
			self.current_player_range = self.starting_player_range.copy()
			self.resolving = self.first_node_resolving
		else:
			if state.terminal or state.is_chance:
				raise ValueError("NotADecisionState")
			if state.current_player != self.position:
				raise ValueError("NotOurTurn")
			self._update_invariant(state)
			self.resolving = self._new_resolving()
			self.resolving.resolve(state, self.current_player_range, self.current_opponent_cfvs_bound)

	def _update_invariant(self, state: PublicState) -> None:
		if (self.last_state is not None) and (self.last_state.street != state.street):
			if self.last_state.street + 1 != state.street:
				raise ValueError("StreetSkipped")
			self.current_opponent_cfvs_bound = self.resolving.get_chance_action_cfv(self.last_action, state.board)
			self.current_player_range = self.card_tools.normalize_range(state.board, self.current_player_range)
		else:
			if self.decision_id == 0:
				if state.street != 1:
					raise ValueError("FirstDecisionNotOnFirstStreet")
				self.current_player_range = self.starting_player_range.copy()
				self.current_opponent_cfvs_bound = self.starting_cfvs_p1.copy()
			else:
				self.current_opponent_cfvs_bound = self.resolving.get_action_cfv(self.last_action)

	def _sample_action(self, state: PublicState) -> ActionType:
		actions = self.resolving.get_possible_actions()
		hand_strategy = np.zeros(len(actions), dtype=float)
		i = 0
		while i < len(actions):
			hand_strategy[i] = self.resolving.get_action_strategy(actions[i])[self.hand]
			i += 1
		if abs(1.0 - float(hand_strategy.sum())) > 1e-3:
			raise RuntimeError("StrategyNotNormalized")

		action = actions[self.rng.sample_index(hand_strategy)]

		action_strategy = self.resolving.get_action_strategy(action)
		self.current_player_range = self.current_player_range * action_strategy
		self.current_player_range = self.card_tools.normalize_range(state.board, self.current_player_range)
		return action

	def compute_action(self, state: PublicState) -> ActionType:
		self._resolve_node(state)
		action = self._sample_action(state)
		self.decision_id += 1
		self.last_action = action
		self.last_state = state
		return action
