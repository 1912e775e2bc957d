from __future__ import annotations

from typing import Any, Dict, List, Mapping

# Accepted spellings per field, first match wins
_ALIASES = {
    'email': ('email', 'Email', 'email_address', 'Email_Address'),
    'name': ('name', 'Name', 'Contact_Name', 'full_name'),
    'linkedin_url': ('linkedin_url', 'LinkedIn_Profile', 'linkedin', 'profile_url'),
}


def map_to_candidate(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a loosely-keyed contact record to the candidate input fields."""
    mapped: Dict[str, Any] = {}
    for field, keys in _ALIASES.items():
        value = None
        for key in keys:
            if raw.get(key) is not None:
                value = raw.get(key)
                break
        mapped[field] = value
    return mapped


def map_all(records: List[Any]) -> List[Dict[str, Any]]:
    """Map a list of records; non-object entries become empty candidates."""
    return [map_to_candidate(r) if isinstance(r, Mapping) else map_to_candidate({}) for r in records]
