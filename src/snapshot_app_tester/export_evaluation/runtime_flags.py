"""Environment flags handed from the driver to the application process."""

from __future__ import annotations

import os
import random
from collections.abc import Mapping

TEST_MODE_ENV_VAR = "SNAPSHOT_APP_TESTER_TEST_MODE"
SEED_ENV_VAR = "SNAPSHOT_APP_TESTER_SEED"
HASH_SEED_ENV_VAR = "PYTHONHASHSEED"

_HASH_SEED_MODULUS = 2**32

_TRUTHY = {"1", "true", "yes", "on"}


def is_test_mode(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when the application runs under the snapshot driver.

    Applications branch on this to serve static fixture data instead of
    live, changing data.
    """
    env = os.environ if environ is None else environ
    return env.get(TEST_MODE_ENV_VAR, "").strip().lower() in _TRUTHY


def seed_from_environment(environ: Mapping[str, str] | None = None) -> int | None:
    """Seed the `random` module from the driver-provided seed, if any."""
    env = os.environ if environ is None else environ
    raw_seed = env.get(SEED_ENV_VAR, "").strip()
    if not raw_seed:
        return None
    try:
        seed = int(raw_seed)
    except ValueError as exc:
        raise ValueError(f"{SEED_ENV_VAR} must be an integer; got '{raw_seed}'.") from exc
    random.seed(seed)
    return seed


def build_app_environment(
    base: Mapping[str, str] | None = None, *, seed: int | None = None
) -> dict[str, str]:
    """Build the environment for a launched application process.

    A seed also fixes ``PYTHONHASHSEED`` so the iteration order of sets of
    strings repeats between seeded runs.
    """
    env = dict(os.environ if base is None else base)
    env[TEST_MODE_ENV_VAR] = "1"
    if seed is None:
        env.pop(SEED_ENV_VAR, None)
    else:
        env[SEED_ENV_VAR] = str(seed)
        env[HASH_SEED_ENV_VAR] = str(seed % _HASH_SEED_MODULUS)
    return env
