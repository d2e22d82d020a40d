import time
import re
from typing import Any, Optional


# ----------------------------
# Helpers
# ----------------------------
PHONE_RE = re.compile(r"^[6-9][0-9]{9}$")


def now_ts() -> float:
    return time.time()


def is_valid_phone(phone: Optional[str]) -> bool:
    # indian mobile: 10 digits, leading 6-9
    if not phone:
        return False
    return PHONE_RE.match(phone) is not None


def clean_str(value: Any, allow_int: bool = False) -> str:
    """Strip a JSON string field; '' for anything that isn't one.

    With `allow_int`, JSON integers (not booleans) are accepted and rendered
    with str(), since student ids and phone numbers sometimes arrive unquoted.
    """
    if isinstance(value, str):
        return value.strip()
    if allow_int and isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return ""
