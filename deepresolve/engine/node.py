"""
I am one public node of a lookahead tree. The tree builder fills my topology (acting
player, terminal kind, pot, board, ordered children, the edge action) once; the CFR
engine then reads and rewrites my numeric fields in place on every iteration.

Key class: Node. Topology fields: acting, is_terminal, terminal_kind, pot, board,
children, action, state, depth. Numeric fields: ranges (2xH, rewritten top-down every
iteration), regrets (AxH, floored, decision nodes only), strategy (AxH averaged
strategy for decision nodes; fixed outcome probabilities for chance nodes),
iter_weight_sum (H), cf_values (2xH, valid for the iteration that produced it),
cf_values_avg and cfv_iterations (uniform average of cf_values over post-burn-in
iterations).

Invariants: children are owned by exactly one parent and there are no back links; the
order of children is the action index; for a fold terminal, acting is the player who
did not fold.
"""

from typing import List, Optional, Tuple

from deepresolve.constants import P1, P2, CHANCE


class Node:
	def __init__(
	 self,
	 acting: int,
	 pot: float,
	 board: Tuple[int, ...] = (),
	 is_terminal: bool = False,
	 terminal_kind=None,
	 action=None,
	 state=None,
	 depth: int = 0,
	):
		self.acting = int(acting)
		self.pot = float(pot)
		self.board = tuple(board)
		self.is_terminal = bool(is_terminal)
		self.terminal_kind = terminal_kind
		self.action = action
		self.state = state
		self.depth = int(depth)
		self.children: List["Node"] = []

		self.ranges = None
		self.regrets = None
		self.strategy = None
		self.iter_weight_sum = None
		self.cf_values = None
		self.cf_values_avg = None
		self.cfv_iterations = 0

	@property
	def is_chance(self) -> bool:
		return (not self.is_terminal) and (self.acting == CHANCE)

	@property
	def is_decision(self) -> bool:
		if self.is_terminal:
			return False
		return (self.acting == P1) or (self.acting == P2)

	@property
	def actions(self) -> List:
		return [c.action for c in self.children]

	def child_for_board(self, board) -> Optional["Node"]:
		b = tuple(int(c) for c in board)
		for c in self.children:
			if c.board == b:
				return c
		return None

	def iter_nodes(self):
		stack = [self]
		while stack:
			n = stack.pop()
			yield n
			i = len(n.children) - 1
			while i >= 0:
				stack.append(n.children[i])
				i -= 1

	def __repr__(self):
		if self.is_terminal:
			kind = f"terminal:{getattr(self.terminal_kind, 'name', self.terminal_kind)}"
		else:
			if self.acting == CHANCE:
				kind = "chance"
			else:
				kind = f"player:{self.acting}"
		return f"Node({kind}, pot={self.pot}, board={self.board}, children={len(self.children)})"
