"""Phone/name canonicalization and matching of requests to stored guests."""

import math
import re
import secrets
import string
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from invite_site.guests.dtos import GuestRecord

MAX_PLUS_ONES = 10
GUEST_ID_PREFIX = "g_"

_NON_PHONE_CHARS = re.compile(r"[^\d+]")
_WHITESPACE_RUN = re.compile(r"\s+")
_ID_ALPHABET = string.ascii_lowercase + string.digits

# National numbers shorter than this never match an international form
_MIN_NATIONAL_DIGITS = 7
_MAX_COUNTRY_CODE_DIGITS = 3


def normalize_phone(phone: str | None) -> str:
    """Keep only digits, plus a leading ``+`` when the number was written with one."""
    cleaned = _NON_PHONE_CHARS.sub("", (phone or "").strip())
    digits = cleaned.replace("+", "")
    if not digits:
        return ""
    return f"+{digits}" if cleaned.startswith("+") else digits


def normalize_name(name: str | None) -> str:
    """Comparison form of a name. Never stored."""
    return _WHITESPACE_RUN.sub(" ", (name or "").strip()).lower()


def clamp_plus_ones(value) -> int:
    """Floor to an integer and clamp to [0, MAX_PLUS_ONES]; anything non-numeric becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, min(MAX_PLUS_ONES, math.floor(number)))


def create_guest_id(taken: Iterable[str] = ()) -> str:
    taken = set(taken)
    while True:
        guest_id = GUEST_ID_PREFIX + "".join(secrets.choice(_ID_ALPHABET) for _ in range(8))
        if guest_id not in taken:
            return guest_id


def is_same_number(stored: str, requested: str) -> bool:
    """
    True when two canonical phones name the same line.

    Identical forms always match. A national number also matches the
    international form of itself (``5551234567`` and ``+15551234567``),
    provided the prefix that differs is a plausible country code.
    """
    if stored == requested:
        return True
    if stored.startswith("+") == requested.startswith("+"):
        return False
    international, national = (stored, requested) if stored.startswith("+") else (requested, stored)
    international = international[1:]
    if len(national) < _MIN_NATIONAL_DIGITS or not international.endswith(national):
        return False
    return 1 <= len(international) - len(national) <= _MAX_COUNTRY_CODE_DIGITS


def find_match(
    guests: Iterable["GuestRecord"],
    phone: str,
    name: str | None = None,
) -> "GuestRecord | None":
    """
    Resolve which stored guest a request refers to.

    Order: exact phone and name, exact phone, then the same two tiers using
    national/international equivalence. Phone is the real key; the name only
    picks between guests sharing a number.
    """
    guests = list(guests)
    wanted_name = normalize_name(name) if name is not None else None

    for same_phone in (
        lambda guest: guest.phone == phone,
        lambda guest: is_same_number(guest.phone, phone),
    ):
        candidates = [guest for guest in guests if same_phone(guest)]
        if wanted_name is not None:
            for guest in candidates:
                if normalize_name(guest.name) == wanted_name:
                    return guest
        if candidates:
            return candidates[0]
    return None
