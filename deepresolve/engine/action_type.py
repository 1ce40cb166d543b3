"""
I define the public action menu used by the Leduc engine, the tree builder, and the
resolver: fold, check/call, half-pot bet, pot-sized bet, two-pot bet, and all-in. Each
child edge of a decision node carries one of these, and the order of a node's children
is the action index everywhere else.

Key class: ActionType with members FOLD, CALL, HALF_POT_BET, POT_SIZED_BET, TWO_POT_BET,
ALL_IN. Key mapping: POT_FRACTION_ACTIONS — pot fraction to the bet action labelling it.

Invariants: values are contiguous and start at zero.
"""

from enum import Enum

class ActionType(Enum):
	FOLD = 0
	CALL = 1
	HALF_POT_BET = 2
	POT_SIZED_BET = 3
	TWO_POT_BET = 4
	ALL_IN = 5


POT_FRACTION_ACTIONS = (
 (0.5, ActionType.HALF_POT_BET),
 (1.0, ActionType.POT_SIZED_BET),
 (2.0, ActionType.TWO_POT_BET),
)
