import re
from datetime import datetime, timezone
from typing import Iterable, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Optional[str]) -> bool:
    """Purpose: Apply the site's loose email shape check (local@domain.tld).
    Inputs/Outputs: Input is a raw string; output is True when it looks like an address.
    Side Effects / State: None; pure function.
    Dependencies: Uses EMAIL_PATTERN; called by the contact and subscribe routes.
    Failure Modes: Returns False for None or empty input.
    If Removed: Malformed addresses are stored as leads.
    Testing Notes: "a@b.co" passes; "a@b", "a b@c.d", "a@b.co\\n" and "" fail.
    """
    # Match the whole value; whitespace anywhere disqualifies it.
    if not value:
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def missing_fields(values: Iterable[Optional[str]]) -> bool:
    """Return True when any required value is absent or empty."""
    return any(not value for value in values)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
