"""
I reconstruct the opponent's root range when re-solving an interior node, from the
opponent counterfactual values carried forward from the previous solve. For each
opponent hand I play a two-action game: "terminate" earns the carried-forward CFV,
"follow" earns whatever the opponent currently achieves inside the re-solve. Regret
matching over these two actions, with regrets floored at a small epsilon, yields a
follow probability per hand, which is the opponent's range for the next CFR iteration.

Key class: CFRDGadget. Key methods: compute_opponent_range — one gadget step from the
opponent's current root CFVs; get — snapshot of the current follow strategy.

Inputs: board (for masking hands that collide with it), the carried-forward opponent
CFVs, and on each step the opponent's root CFVs from the last CFR pass. Outputs: an H
vector in [0, 1], zero on board-blocked hands.

Invariants: both regret vectors stay >= epsilon, so the follow and terminate
probabilities always sum to one on possible hands; the first step, taken with zero
current CFVs, starts from "always terminate".
"""

from typing import Sequence
import numpy as np

from deepresolve.constants import GADGET_EPSILON
from deepresolve.engine.card_tools import CardTools


class CFRDGadget:
	def __init__(
	 self,
	 board: Sequence[int],
	 opponent_cfvs,
	 card_tools: CardTools = None,
	 regret_epsilon: float = GADGET_EPSILON,
	):
		if card_tools is not None:
			self.card_tools = card_tools
		else:
			self.card_tools = CardTools()
		H = self.card_tools.hand_count
		self.input_opponent_value = np.array(opponent_cfvs, dtype=float)
		if self.input_opponent_value.shape != (H,):
			raise ValueError("OpponentCfvShapeInvalid")
		self.regret_epsilon = float(regret_epsilon)

		self.play_current_strategy = np.zeros(H, dtype=float)
		self.terminate_current_strategy = np.ones(H, dtype=float)
		self.play_regrets = np.zeros(H, dtype=float)
		self.terminate_regrets = np.zeros(H, dtype=float)
		self.range_mask = self.card_tools.get_possible_hand_indexes(board)
		self.steps = 0

	def compute_opponent_range(self, current_opponent_cfvs, iteration: int = 0) -> np.ndarray:
		play_values = np.asarray(current_opponent_cfvs, dtype=float)
		terminate_values = self.input_opponent_value
		if play_values.shape != terminate_values.shape:
			raise ValueError("OpponentCfvShapeInvalid")

		total_values = play_values * self.play_current_strategy
		total_values = total_values + terminate_values * self.terminate_current_strategy

		self.play_regrets += play_values - total_values
		self.terminate_regrets += terminate_values - total_values

		np.maximum(self.play_regrets, self.regret_epsilon, out=self.play_regrets)
		np.maximum(self.terminate_regrets, self.regret_epsilon, out=self.terminate_regrets)

		regret_sum = self.play_regrets + self.terminate_regrets
		self.play_current_strategy = self.play_regrets / regret_sum
		self.terminate_current_strategy = self.terminate_regrets / regret_sum

		self.play_current_strategy *= self.range_mask
		self.terminate_current_strategy *= self.range_mask

		self.steps += 1
		return self.play_current_strategy.copy()

	def get(self) -> np.ndarray:
		return self.play_current_strategy.copy()
