"""
I define the player indices, numeric floors, and seeds shared by the engine, the
resolver, and the tests. Players use one zero-based enumeration: P1 = 0 acts first on
every street, P2 = 1, and CHANCE = 2 marks nodes whose outcome is dealt rather than
chosen. CHANCE sits outside the row range of a 2xH matrix so that indexing a
player row with it fails loudly.

Key symbols: P1, P2, CHANCE, PLAYERS_COUNT — player enumeration; REGRET_EPSILON — the
floor every stored regret sits at or above; GADGET_EPSILON — the floor used by the
CFR-D gadget; EPS_SUM — tolerance for probability sums; EPS_ZS — zero-sum tolerance;
SEED_DEFAULT — default RNG seed.

I serve no I/O myself. Callers compare floats against these tolerances instead of zero.
"""

P1 = 0
P2 = 1
CHANCE = 2
PLAYERS_COUNT = 2

REGRET_EPSILON = 1e-9
GADGET_EPSILON = 1e-8

EPS_SUM = 1e-9
EPS_ZS  = 1e-6

SEED_DEFAULT = 1729
