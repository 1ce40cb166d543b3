"""
I hold the Leduc hold'em deck and the range helpers that depend on it. The deck has
three ranks (J, Q, K) in two suits; a card index is rank * SUIT_COUNT + suit and, since
each player holds a single private card, a hand index is the same number as its card
index. Ranges are float vectors of length HAND_COUNT.

Key class: CardTools. Key methods: card_to_string/string_to_card — two-character codes
such as "Qh"; get_possible_hand_indexes — 0/1 mask of hands not blocked by the board;
get_uniform_range — uniform distribution over possible hands; normalize_range — mask
then rescale; get_second_round_boards — every one-card board; board_to_street.

Invariants: boards are tuples of card indices, so they hash and serve as cache keys.
"""

from typing import List, Tuple, Sequence
import numpy as np

RANKS = "JQK"
SUITS = "hs"

RANK_COUNT = len(RANKS)
SUIT_COUNT = len(SUITS)
CARD_COUNT = RANK_COUNT * SUIT_COUNT
HAND_COUNT = CARD_COUNT
BOARD_CARD_COUNT = 1
STREETS_COUNT = 2


class CardTools:
	def __init__(self):
		self.card_count = CARD_COUNT
		self.hand_count = HAND_COUNT

	def card_rank(self, card: int) -> int:
		return int(card) // SUIT_COUNT

	def card_suit(self, card: int) -> int:
		return int(card) % SUIT_COUNT

	def card_to_string(self, card: int) -> str:
		c = int(card)
		if (c < 0) or (c >= CARD_COUNT):
			raise ValueError("CardIndexOutOfRange")
		return RANKS[self.card_rank(c)] + SUITS[self.card_suit(c)]

	def string_to_card(self, code: str) -> int:
		s = str(code).strip()
		if len(s) != 2:
			raise ValueError("CardCodeInvalid")
		r = RANKS.find(s[0].upper())
		u = SUITS.find(s[1].lower())
		if (r < 0) or (u < 0):
			raise ValueError("CardCodeInvalid")
		return r * SUIT_COUNT + u

	def board_to_string(self, board: Sequence[int]) -> str:
		return "".join(self.card_to_string(c) for c in board)

	def board_to_street(self, board: Sequence[int]) -> int:
		if len(board) == 0:
			return 1
		else:
			return 2

	def get_second_round_boards(self) -> List[Tuple[int, ...]]:
		return [(c,) for c in range(CARD_COUNT)]

	def get_possible_hand_indexes(self, board: Sequence[int]) -> np.ndarray:
		out = np.ones(HAND_COUNT, dtype=float)
		for c in board:
			out[int(c)] = 0.0
		return out

	def get_impossible_hand_indexes(self, board: Sequence[int]) -> np.ndarray:
		return 1.0 - self.get_possible_hand_indexes(board)

	def get_uniform_range(self, board: Sequence[int]) -> np.ndarray:
		mask = self.get_possible_hand_indexes(board)
		return mask / mask.sum()

	def is_valid_range(self, range_vec, board: Sequence[int]) -> bool:
		r = np.asarray(range_vec, dtype=float)
		if r.shape != (HAND_COUNT,):
			return False
		if np.any(r < 0.0):
			return False
		impossible = self.get_impossible_hand_indexes(board)
		if float(np.sum(r * impossible)) > 0.0:
			return False
		return abs(float(r.sum()) - 1.0) < 1e-6

	def normalize_range(self, board: Sequence[int], range_vec) -> np.ndarray:
		r = np.asarray(range_vec, dtype=float) * self.get_possible_hand_indexes(board)
		s = float(r.sum())
		if s <= 0.0:
			raise ValueError("RangeMassZeroAfterMasking")
		return r / s
