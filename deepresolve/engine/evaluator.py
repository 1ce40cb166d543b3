"""
I rank Leduc showdown hands. A hand is one private card plus the (at most one) board
card: pairing the board beats any unpaired hand, and otherwise the higher private rank
wins. Suits never matter, so two hands of equal rank tie.
"""

from typing import Sequence

from deepresolve.engine.card_tools import SUIT_COUNT, RANK_COUNT


def hand_strength(hand: int, board: Sequence[int]) -> int:
	r = int(hand) // SUIT_COUNT
	for c in board:
		if int(c) // SUIT_COUNT == r:
			return RANK_COUNT + r
	return r


def compare_hands(hand_a: int, hand_b: int, board: Sequence[int]) -> int:
	sa = hand_strength(hand_a, board)
	sb = hand_strength(hand_b, board)
	if sa > sb:
		return 1
	else:
		if sa < sb:
			return -1
		else:
			return 0
