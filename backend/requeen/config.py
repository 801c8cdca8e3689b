"""Environment driven settings for the requeening engine."""

import os

# purpose: centralize operator-tunable bounds for introductions and alert windows
# status: active


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


INTRO_DELAY_MIN_DAYS = _int_env("INTRO_DELAY_MIN_DAYS", 1)
INTRO_DELAY_MAX_DAYS = _int_env("INTRO_DELAY_MAX_DAYS", 60)

# days between an introduction and its laying check when the caller omits one
DEFAULT_CHECK_DELAYS = {
    "cell": _int_env("CHECK_DELAY_CELL_DAYS", 15),
    "virgin": _int_env("CHECK_DELAY_VIRGIN_DAYS", 14),
    "mated": _int_env("CHECK_DELAY_MATED_DAYS", 7),
}

UPCOMING_DAYS_AHEAD = _int_env("UPCOMING_DAYS_AHEAD", 7)
UPCOMING_GRACE_DAYS = _int_env("UPCOMING_GRACE_DAYS", 30)

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ACCESS_TOKEN_EXPIRE_MINUTES = _int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 12)
