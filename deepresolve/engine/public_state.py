"""
I model the public state of a heads-up Leduc hold'em hand: street, board, the player to
act, and the chips each player has committed. I generate the legal action menu
(including pot-fraction bet sizing) and the successor state for an action or a dealt
card. I know nothing about private cards; ranges live on tree nodes.

Key classes: TerminalKind — FOLD or SHOWDOWN; PublicState. Key methods: legal_actions —
ordered ActionType menu; possible_bets — (ActionType, new bet) pairs for raises;
update_state — successor after an action; deal — street-2 state after a chance event;
pot — chips at stake for the loser.

Invariants: bets never exceed the stack; the player to act never has more chips in
than the opponent; after FOLD the state's current_player is the non-folding player.
A state awaiting the board card has is_chance set and current_player == CHANCE.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

from deepresolve.constants import P1, P2, CHANCE, EPS_SUM
from deepresolve.engine.action_type import ActionType, POT_FRACTION_ACTIONS


class TerminalKind(Enum):
	FOLD = 0
	SHOWDOWN = 1


class PublicState:
	def __init__(
	 self,
	 street: int = 1,
	 board: Sequence[int] = (),
	 current_player: int = P1,
	 bets: Sequence[int] = (100, 100),
	 ante: int = 100,
	 stack: int = 1200,
	 terminal: bool = False,
	 terminal_kind: Optional[TerminalKind] = None,
	 is_chance: bool = False,
	):
		self.street = int(street)
		self.board = tuple(int(c) for c in board)
		self.current_player = int(current_player)
		self.bets = [int(bets[0]), int(bets[1])]
		self.ante = int(ante)
		self.stack = int(stack)
		self.terminal = bool(terminal)
		self.terminal_kind = terminal_kind
		self.is_chance = bool(is_chance)

	@staticmethod
	def initial(ante: int = 100, stack: int = 1200) -> "PublicState":
		return PublicState(
		 street=1,
		 board=(),
		 current_player=P1,
		 bets=(ante, ante),
		 ante=ante,
		 stack=stack,
		)

	def clone(self) -> "PublicState":
		return PublicState(
		 street=self.street,
		 board=self.board,
		 current_player=self.current_player,
		 bets=self.bets,
		 ante=self.ante,
		 stack=self.stack,
		 terminal=self.terminal,
		 terminal_kind=self.terminal_kind,
		 is_chance=self.is_chance,
		)

	@property
	def pot(self) -> int:
		return min(self.bets[0], self.bets[1])

	def _opponent(self) -> int:
		return 1 - self.current_player

	def facing_bet(self) -> bool:
		return self.bets[self.current_player] < self.bets[self._opponent()]

	def possible_bets(
	 self,
	 bet_fractions: Sequence[float] = (1.0,),
	 include_all_in: bool = True,
	) -> List[Tuple[ActionType, int]]:
		if self.terminal or self.is_chance:
			return []
		cp = self.current_player
		opponent_bet = self.bets[self._opponent()]
		if self.bets[cp] > opponent_bet:
			raise ValueError("ActorAheadInBets")
		max_raise_size = self.stack - opponent_bet
		min_raise_size = opponent_bet - self.bets[cp]
		if min_raise_size < self.ante:
			min_raise_size = self.ante
		if max_raise_size < min_raise_size:
			min_raise_size = max_raise_size
		if min_raise_size <= 0:
			return []
		if min_raise_size == max_raise_size:
			return [(ActionType.ALL_IN, opponent_bet + max_raise_size)]
		out: List[Tuple[ActionType, int]] = []
		pot = opponent_bet * 2
		for frac, label in POT_FRACTION_ACTIONS:
			wanted = False
			for f in bet_fractions:
				if abs(float(f) - frac) < EPS_SUM:
					wanted = True
			if not wanted:
				continue
			raise_size = int(round(pot * frac))
			if (raise_size >= min_raise_size) and (raise_size < max_raise_size):
				out.append((label, opponent_bet + raise_size))
		if include_all_in:
			out.append((ActionType.ALL_IN, opponent_bet + max_raise_size))
		return out

	def legal_actions(
	 self,
	 bet_fractions: Sequence[float] = (1.0,),
	 include_all_in: bool = True,
	) -> List[ActionType]:
		if self.terminal or self.is_chance:
			return []
		out: List[ActionType] = []
		if self.facing_bet():
			out.append(ActionType.FOLD)
		out.append(ActionType.CALL)
		for label, _ in self.possible_bets(bet_fractions, include_all_in):
			out.append(label)
		return out

	def update_state(
	 self,
	 action: ActionType,
	 bet_fractions: Sequence[float] = (1.0,),
	 include_all_in: bool = True,
	) -> "PublicState":
		if self.terminal or self.is_chance:
			raise ValueError("NoActionAtThisState")
		cp = self.current_player
		opp = self._opponent()
		nxt = self.clone()

		if action == ActionType.FOLD:
			if not self.facing_bet():
				raise ValueError("IllegalAction")
			nxt.terminal = True
			nxt.terminal_kind = TerminalKind.FOLD
			nxt.current_player = opp
			return nxt

		if action == ActionType.CALL:
			was_facing = self.facing_bet()
			nxt.bets[cp] = self.bets[opp]
			if (not was_facing) and (cp == P1):
				nxt.current_player = P2
				return nxt
			all_in = (nxt.bets[cp] >= self.stack)
			if (self.street == 1) and (not all_in):
				nxt.is_chance = True
				nxt.current_player = CHANCE
				return nxt
			nxt.terminal = True
			nxt.terminal_kind = TerminalKind.SHOWDOWN
			nxt.current_player = opp
			return nxt

		for label, new_bet in self.possible_bets(bet_fractions, include_all_in):
			if label == action:
				nxt.bets[cp] = int(new_bet)
				nxt.current_player = opp
				return nxt
		raise ValueError("IllegalAction")

	def deal(self, card: int) -> "PublicState":
		if not self.is_chance:
			raise ValueError("NotAChanceState")
		c = int(card)
		if c in self.board:
			raise ValueError("CardAlreadyOnBoard")
		nxt = self.clone()
		nxt.board = self.board + (c,)
		nxt.street = self.street + 1
		nxt.is_chance = False
		nxt.current_player = P1
		return nxt

	def __repr__(self):
		return (
		 f"PublicState(street={self.street}, board={self.board}, "
		 f"current_player={self.current_player}, bets={self.bets}, "
		 f"terminal={self.terminal}, chance={self.is_chance})"
		)
