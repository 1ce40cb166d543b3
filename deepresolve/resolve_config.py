"""
I centralize runtime configuration for the re-solver and the continual re-solving
agent. I expose ResolveConfig with typed fields and a from_env helper that builds a
profile for fast tests or full runs. A caller can set the CFR iteration budget and
burn-in, the Leduc game parameters (ante, stack), the bet-sizing menu, the regret
floors, the sampling seed, and a debug flag that turns on diagnostic prints.

Key classes/functions: ResolveConfig — config object; from_env — construct config with
env-aware defaults and coerced overrides; _env_flag/_env_int — parse environment
booleans and ints; _coerce_* — tolerant conversions for override values.

Inputs: optional overrides dict and environment variables FAST_TESTS, FAST_TEST_SEED,
DEBUG_RESOLVE. Outputs: a populated ResolveConfig instance. Invariants: iteration counts
are non-negative, cfr_skip_iters never exceeds cfr_iters, and bet fractions are floats.

Edge cases: unknown override keys are ignored; a burn-in larger than the iteration
budget is clamped to the budget.
"""

from deepresolve.constants import SEED_DEFAULT, REGRET_EPSILON, GADGET_EPSILON
from dataclasses import dataclass, field
import os
from typing import Optional, Dict, Any, List, Literal


def _env_flag(name: str, default: bool) -> bool:
	val = os.getenv(name, None)

	if val is None:
		return bool(default)
	else:
		v = val.strip().lower()

		if v in ("1", "true", "t", "yes", "y", "on"):
			return True
		else:
			if v in ("0", "false", "f", "no", "n", "off"):
				return False
			else:
				return bool(default)


def _env_int(name: str, default: int) -> int:
	val = os.getenv(name, None)

	if val is None:
		return int(default)
	else:
		s = val.strip()

		if (s.startswith("-") and s[1:].isdigit()) or s.isdigit():
			return int(s)
		else:
			return int(default)


def _coerce_float(x: Any, default: float) -> float:
	if isinstance(x, bool):
		return float(int(x))

	if isinstance(x, (int, float)):
		return float(x)

	if isinstance(x, str):
		s = x.strip()
		try_digits = s.replace(".", "", 1).lstrip("+-")

		if try_digits.isdigit():
			return float(s)
		else:
			return float(default)

	return float(default)


def _coerce_int(x: Any, default: int) -> int:
	if isinstance(x, bool):
		return int(x)

	if isinstance(x, int):
		return int(x)

	if isinstance(x, float):
		return int(x)

	if isinstance(x, str):
		s = x.strip()
		sign_ok = (s.startswith("-") and s[1:].isdigit()) or s.isdigit()

		if sign_ok:
			return int(s)
		else:
			return int(default)

	return int(default)


def _coerce_bool(x: Any, default: bool) -> bool:
	if isinstance(x, bool):
		return bool(x)

	if isinstance(x, (int, float)):
		return bool(x)

	if isinstance(x, str):
		v = x.strip().lower()

		if v in ("1", "true", "t", "yes", "y", "on"):
			return True
		else:
			if v in ("0", "false", "f", "no", "n", "off"):
				return False
			else:
				return bool(default)

	return bool(default)


_INT_FIELDS = ("cfr_iters", "cfr_skip_iters", "ante", "stack", "seed")
_FLOAT_FIELDS = ("regret_epsilon", "gadget_epsilon")
_BOOL_FIELDS = ("include_all_in", "street_limit", "debug")


@dataclass
class ResolveConfig:
	profile: Literal["bot", "test"] = field(
	 default_factory=lambda: ("test" if os.getenv("FAST_TESTS") == "1" else "bot")
	)
	seed: int = field(default_factory=lambda: _env_int("FAST_TEST_SEED", SEED_DEFAULT))
	debug: bool = field(default_factory=lambda: _env_flag("DEBUG_RESOLVE", False))

	cfr_iters: int = 1000
	cfr_skip_iters: int = 500

	ante: int = 100
	stack: int = 1200
	bet_fractions: List[float] = field(default_factory=lambda: [1.0])
	include_all_in: bool = True
	street_limit: bool = False

	regret_epsilon: float = REGRET_EPSILON
	gadget_epsilon: float = GADGET_EPSILON

	@staticmethod
	def from_env(
	 overrides: Optional[Dict[str, Any]] = None
	) -> "ResolveConfig":
		cfg = ResolveConfig()

		fast = (os.getenv("FAST_TESTS") == "1")
		if overrides and (overrides.get("profile", None) == "test"):
			fast = True

		if fast:
			cfg.profile = "test"
			cfg.cfr_iters = 40
			cfg.cfr_skip_iters = 20

		if overrides:
			for k, v in overrides.items():
				if not hasattr(cfg, k):
					continue
				if k in _INT_FIELDS:
					setattr(cfg, k, _coerce_int(v, getattr(cfg, k)))
				else:
					if k in _FLOAT_FIELDS:
						setattr(cfg, k, _coerce_float(v, getattr(cfg, k)))
					else:
						if k in _BOOL_FIELDS:
							setattr(cfg, k, _coerce_bool(v, getattr(cfg, k)))
						else:
							if k == "bet_fractions":
								fr = []
								for x in list(v or []):
									fr.append(_coerce_float(x, 1.0))
								cfg.bet_fractions = fr
							else:
								setattr(cfg, k, v)

		if cfg.cfr_iters < 1:
			cfg.cfr_iters = 1
		if cfg.cfr_skip_iters < 0:
			cfg.cfr_skip_iters = 0
		if cfg.cfr_skip_iters > cfg.cfr_iters:
			cfg.cfr_skip_iters = cfg.cfr_iters

		return cfg
