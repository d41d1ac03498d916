# app/utils/guest_names.py  # Display helpers for invitee names.

from typing import Iterable, List, Sequence

UNKNOWN_GUEST = "Unknown Guest"


def format_guest_names(names: Sequence[str]) -> str:
    """Joins names for display.

    [] -> "", ["John"] -> "John", ["John", "Jane"] -> "John & Jane",
    ["Michael", "Sarah", "Emma"] -> "Michael, Sarah & Emma".
    """
    names = list(names)
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " & " + names[-1]


def primary_first(invitees: Iterable) -> List:
    """Stable sort putting is_primary invitees before the rest."""
    return sorted(invitees, key=lambda inv: 0 if inv.is_primary else 1)


def format_party_name(invitees: Iterable) -> str:
    """Party display name grouped by surname, primary guest's group first.

    John Smith (primary), Jane Smith, Bob Jones -> "John & Jane Smith & Bob Jones".
    """
    ordered = primary_first(invitees)
    if not ordered:
        return UNKNOWN_GUEST

    groups: dict[str, List[str]] = {}  # Insertion order = encounter order.
    for inv in ordered:
        groups.setdefault(inv.last_name or "", []).append(inv.first_name)

    parts = [f"{format_guest_names(first)} {surname}".strip() for surname, first in groups.items()]
    return format_guest_names(parts)


def full_name(invitee) -> str:
    return f"{invitee.first_name} {invitee.last_name or ''}".strip()
