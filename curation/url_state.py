"""Shareable URL state for the faculty dashboard.

The dashboard keeps a handful of view toggles and filters in the query
string so a view can be bookmarked or shared:

==============  ==========================  =========================
parameter       field                       encoding
==============  ==========================  =========================
``map``         ``show_map``                ``"true"`` or absent
``timeline``    ``show_timeline``           ``"true"`` or absent
``comparisons`` ``show_comparisons``        ``"true"`` or absent
``analytics``   ``show_drilldown``          ``"true"`` or absent
``historical``  ``show_inactive_workshops`` ``"true"`` or absent
``workshop``    ``selected_workshop``       workshop id, when set
``year``        ``selected_year``           integer, when set
==============  ==========================  =========================

Values are not validated against known workshops or years; that is up
to whoever consumes the state.
"""

import re
from dataclasses import dataclass, fields, replace
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

# field name -> query parameter, in serialization order
FLAG_PARAMS = {
    "show_map": "map",
    "show_timeline": "timeline",
    "show_comparisons": "comparisons",
    "show_drilldown": "analytics",
    "show_inactive_workshops": "historical",
}
WORKSHOP_PARAM = "workshop"
YEAR_PARAM = "year"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class UrlState:
    show_map: bool = False
    show_timeline: bool = False
    show_comparisons: bool = False
    show_drilldown: bool = False
    show_inactive_workshops: bool = False
    selected_workshop: Optional[str] = None
    selected_year: Optional[int] = None


DEFAULT_STATE = UrlState()

_FIELD_NAMES = frozenset(f.name for f in fields(UrlState))


def _parse_int(value: str) -> Optional[int]:
    m = _LEADING_INT_RE.match(value)
    return int(m.group(1)) if m else None


def decode_query(query: str) -> UrlState:
    """Build a state from a query string (with or without leading ``?``).

    Flags are enabled only by the literal value ``"true"``; anything else
    leaves the default.  ``year`` takes the leading integer of its value.
    """
    params = parse_qs(query.lstrip("?"), keep_blank_values=True)

    def first(name: str) -> Optional[str]:
        values = params.get(name)
        return values[0] if values else None

    changes: dict = {}
    for field_name, param in FLAG_PARAMS.items():
        if first(param) == "true":
            changes[field_name] = True

    workshop = first(WORKSHOP_PARAM)
    if workshop:
        changes["selected_workshop"] = workshop

    year = first(YEAR_PARAM)
    if year:
        parsed = _parse_int(year)
        if parsed is not None:
            changes["selected_year"] = parsed

    return replace(DEFAULT_STATE, **changes)


def encode_query(state: UrlState) -> str:
    """Serialize *state*; flags only when true, filters only when set."""
    params: list[tuple[str, str]] = []
    for field_name, param in FLAG_PARAMS.items():
        if getattr(state, field_name):
            params.append((param, "true"))
    if state.selected_workshop:
        params.append((WORKSHOP_PARAM, state.selected_workshop))
    if state.selected_year:
        params.append((YEAR_PARAM, str(state.selected_year)))
    return urlencode(params)


def _with_query(base: str, query: str) -> str:
    return f"{base}?{query}" if query else base


class UrlStateStore:
    """Dashboard URL state bound to a current location.

    The state is decoded once from *location* at construction.  Each
    :meth:`update` merges the changes, re-encodes the full state and
    replaces the current location in place (a history replace, not a
    push), so a later update fully overwrites the parameters written by
    an earlier one.
    """

    def __init__(self, location: str):
        parts = urlsplit(location)
        self.origin = f"{parts.scheme}://{parts.netloc}" if parts.netloc else ""
        self.path = parts.path or "/"
        self.state = decode_query(parts.query)
        self.location = location
        self.history: list[str] = [location]

    def _merged(self, changes: dict) -> UrlState:
        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise TypeError(f"unknown URL state field(s): {', '.join(sorted(unknown))}")
        return replace(self.state, **changes)

    def update(self, **changes) -> str:
        """Apply *changes* and return the new relative URL (path + query)."""
        self.state = self._merged(changes)
        relative = _with_query(self.path, encode_query(self.state))
        self.location = f"{self.origin}{relative}"
        self.history[-1] = self.location
        return relative

    def share_url(self, **changes) -> str:
        """Absolute URL for the current state plus *changes*.

        Built from origin and path only, so it does not depend on whatever
        query the current location carries.  The stored state is unchanged.
        """
        query = encode_query(self._merged(changes))
        return _with_query(f"{self.origin}{self.path}", query)
