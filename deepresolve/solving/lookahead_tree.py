"""
I build the public lookahead tree that the CFR engine iterates over. Starting from a
PublicState I expand player nodes into one child per legal action (in menu order),
chance nodes into one child per dealable board card, and stop at fold and showdown
terminals. Leduc is small enough that the default tree runs to the end of the hand;
with street_limit set, the street-ending transition becomes a showdown on the current
board, valued with the next-street-averaged equity.

Key class: LookaheadTreeBuilder. Key methods: build — construct and link the tree;
_action_menu — filter the state's legal actions by configured sizes; _deal_next_card —
cards a chance node can deal; _fill_chance_strategy — fixed outcome probabilities.

Inputs: a PublicState. Outputs: the root Node, fully linked. Invariants: action order
is fixed here and never changes afterwards; chance probabilities for a hand are
1 / (card_count - board_size - 2) on every board it does not collide with, so each pair
of non-colliding private hands sees its possible boards with total probability one.
"""

from typing import List, Sequence, Dict, Any
import numpy as np

from deepresolve.constants import CHANCE
from deepresolve.engine.action_type import ActionType
from deepresolve.engine.card_tools import CardTools
from deepresolve.engine.node import Node
from deepresolve.engine.public_state import PublicState, TerminalKind


class LookaheadTreeBuilder:
	def __init__(
	 self,
	 card_tools: CardTools = None,
	 bet_fractions: Sequence[float] = None,
	 include_all_in: bool = True,
	 street_limit: bool = False,
	):
		if card_tools is not None:
			self.card_tools = card_tools
		else:
			self.card_tools = CardTools()
		self.bet_fractions = list(bet_fractions or [1.0])
		self.include_all_in = bool(include_all_in)
		self.street_limit = bool(street_limit)

	def _action_menu(self, ps: PublicState) -> List[ActionType]:
		legal = ps.legal_actions(tuple(self.bet_fractions), self.include_all_in)
		out: List[ActionType] = []
		if ActionType.FOLD in legal:
			out.append(ActionType.FOLD)
		if ActionType.CALL in legal:
			out.append(ActionType.CALL)
		for a in (ActionType.HALF_POT_BET, ActionType.POT_SIZED_BET, ActionType.TWO_POT_BET):
			if a in legal:
				out.append(a)
		if self.include_all_in:
			if ActionType.ALL_IN in legal:
				out.append(ActionType.ALL_IN)
		return out

	def _deal_next_card(self, ps: PublicState) -> List[int]:
		used = set(ps.board)
		return [c for c in range(self.card_tools.card_count) if c not in used]

	def _make_node(self, ps: PublicState, action, depth: int) -> Node:
		if ps.terminal:
			return Node(
			 acting=ps.current_player,
			 pot=ps.pot,
			 board=ps.board,
			 is_terminal=True,
			 terminal_kind=ps.terminal_kind,
			 action=action,
			 state=ps,
			 depth=depth,
			)
		else:
			if ps.is_chance and self.street_limit:
				cut = ps.clone()
				cut.is_chance = False
				cut.terminal = True
				cut.terminal_kind = TerminalKind.SHOWDOWN
				return Node(
				 acting=CHANCE,
				 pot=cut.pot,
				 board=cut.board,
				 is_terminal=True,
				 terminal_kind=TerminalKind.SHOWDOWN,
				 action=action,
				 state=cut,
				 depth=depth,
				)
			return Node(
			 acting=ps.current_player,
			 pot=ps.pot,
			 board=ps.board,
			 action=action,
			 state=ps,
			 depth=depth,
			)

	def _fill_chance_strategy(self, node: Node) -> None:
		H = self.card_tools.hand_count
		A = len(node.children)
		denom = float(self.card_tools.card_count - len(node.board) - 2)
		if denom <= 0.0:
			raise ValueError("NotEnoughCardsForChance")
		strategy = np.zeros((A, H), dtype=float)
		i = 0
		while i < A:
			mask = self.card_tools.get_possible_hand_indexes(node.children[i].board)
			strategy[i, :] = mask / denom
			i += 1
		node.strategy = strategy

	def _expand_chance_children(self, node: Node, stack: List[Node]) -> None:
		ps = node.state
		for card in self._deal_next_card(ps):
			ps2 = ps.deal(card)
			child = self._make_node(ps2, None, node.depth + 1)
			node.children.append(child)
			if not child.is_terminal:
				stack.append(child)
		self._fill_chance_strategy(node)

	def _advance_to_action_children(self, node: Node, stack: List[Node]) -> None:
		ps = node.state
		menu = self._action_menu(ps)
		if not menu:
			raise ValueError("EmptyActionMenu")
		for a in menu:
			ps2 = ps.update_state(a, tuple(self.bet_fractions), self.include_all_in)
			child = self._make_node(ps2, a, node.depth + 1)
			node.children.append(child)
			if not child.is_terminal:
				stack.append(child)

	def build(self, public_state: PublicState) -> Node:
		root = self._make_node(public_state, None, 0)
		stack: List[Node] = []
		if not root.is_terminal:
			stack.append(root)
		while stack:
			cur = stack.pop()
			if cur.state.is_chance:
				self._expand_chance_children(cur, stack)
			else:
				self._advance_to_action_children(cur, stack)
		return root

	def tree_stats(self, root: Node) -> Dict[str, Any]:
		counts = {"decision": 0, "chance": 0, "fold": 0, "showdown": 0}
		max_depth = 0
		for n in root.iter_nodes():
			if n.depth > max_depth:
				max_depth = n.depth
			if n.is_terminal:
				if n.terminal_kind == TerminalKind.FOLD:
					counts["fold"] += 1
				else:
					counts["showdown"] += 1
			else:
				if n.acting == CHANCE:
					counts["chance"] += 1
				else:
					counts["decision"] += 1
		counts["max_depth"] = max_depth
		return counts
