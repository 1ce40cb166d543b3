"""
I evaluate terminal nodes for every pair of private hands at once. For a board I build
two HxH matrices: a fold matrix (1 where the two hands can coexist with each other and
with the board) and a call matrix (+1/-1/0 for win/loss/tie of the row hand against the
column hand, 0 for impossible pairs). For an empty board, reached when both players are
all-in before the board card, the call matrix is the average of the one-card-board
matrices.

Key class: TerminalEquity. Key methods: set_board — build both matrices for a board and
return self; fold_value / call_value — fill a 2xH output with per-hand values against
the opposing range; fold_value negates the folding player's row.

Inputs: 2xH reach-weighted ranges (rows per player). Outputs: 2xH values per unit of
pot; the caller scales by the node's pot. Invariants: both matrices are symmetric /
antisymmetric respectively, so sum_p ranges[p] . out[p] == 0 for any ranges; I am never
mutated after set_board.
"""

from typing import Sequence
import numpy as np

from deepresolve.engine.card_tools import CardTools
from deepresolve.engine.evaluator import compare_hands


class TerminalEquity:
	def __init__(self, card_tools: CardTools = None):
		if card_tools is not None:
			self.card_tools = card_tools
		else:
			self.card_tools = CardTools()
		self.board = None
		self.fold_matrix = None
		self.call_matrix = None

	def _block_matrix(self, board: Sequence[int]) -> np.ndarray:
		H = self.card_tools.hand_count
		possible = self.card_tools.get_possible_hand_indexes(board)
		block = np.ones((H, H), dtype=float) - np.eye(H, dtype=float)
		block *= possible.reshape(H, 1)
		block *= possible.reshape(1, H)
		return block

	def _last_round_call_matrix(self, board: Sequence[int]) -> np.ndarray:
		H = self.card_tools.hand_count
		out = np.zeros((H, H), dtype=float)
		i = 0
		while i < H:
			j = 0
			while j < H:
				out[i, j] = float(compare_hands(i, j, board))
				j += 1
			i += 1
		return out * self._block_matrix(board)

	def _set_call_matrix(self, board: Sequence[int]) -> None:
		if self.card_tools.board_to_street(board) == 1:
			H = self.card_tools.hand_count
			acc = np.zeros((H, H), dtype=float)
			for next_board in self.card_tools.get_second_round_boards():
				acc += self._last_round_call_matrix(next_board)
			weight = 1.0 / float(self.card_tools.card_count - 2)
			self.call_matrix = acc * weight
		else:
			self.call_matrix = self._last_round_call_matrix(board)

	def _set_fold_matrix(self, board: Sequence[int]) -> None:
		self.fold_matrix = self._block_matrix(board)

	def set_board(self, board: Sequence[int]) -> "TerminalEquity":
		self.board = tuple(int(c) for c in board)
		self._set_call_matrix(self.board)
		self._set_fold_matrix(self.board)
		return self

	def _check_shapes(self, ranges: np.ndarray, out: np.ndarray) -> None:
		H = self.card_tools.hand_count
		if ranges.shape != (2, H):
			raise RuntimeError("ShapeMismatch")
		if out.shape != (2, H):
			raise RuntimeError("ShapeMismatch")

	def call_value(self, ranges: np.ndarray, out: np.ndarray) -> None:
		self._check_shapes(ranges, out)
		out[0, :] = self.call_matrix @ ranges[1, :]
		out[1, :] = self.call_matrix @ ranges[0, :]

	def fold_value(self, ranges: np.ndarray, out: np.ndarray, folding_player: int) -> None:
		self._check_shapes(ranges, out)
		out[0, :] = self.fold_matrix @ ranges[1, :]
		out[1, :] = self.fold_matrix @ ranges[0, :]
		out[int(folding_player), :] *= -1.0
