"""Multiparam composite value extraction.

Form inputs may split a single value over several keys::

    {"dob(1i)": "1999", "dob(2i)": "01", "dob(3i)": "02"}

For every multiparam mapping the fragments are sorted by index, coerced
according to their type tag and passed positionally to the mapping's
multiparam type, producing ``{"dob": date(1999, 1, 2)}``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flat_mapper.mapping.mapping import Mapping

logger = logging.getLogger(__name__)

# Type tag -> coercion applied to the raw fragment value
_COERCIONS: dict[str, Callable[[Any], Any]] = {
    "i": int,
    "f": float,
    "s": str,
}

_FRAGMENT_PATTERN = r"^{name}\((\d+)([isf]?)\)$"


def _coerce(value: Any, tag: str) -> Any:
    return _COERCIONS[tag](value) if tag else value


def compose(multiparam: type, fragments: dict[str, Any], pattern: re.Pattern[str]) -> Any:
    """Build one *multiparam* value from matching *fragments*.

    Returns None if a fragment cannot be coerced or construction fails.
    """
    indexed: list[tuple[int, str, Any]] = []
    for key, value in fragments.items():
        match = pattern.match(key)
        if match is None:
            continue
        indexed.append((int(match.group(1)), match.group(2), value))
    indexed.sort(key=lambda item: item[0])

    try:
        args = [_coerce(value, tag) for _, tag, value in indexed]
        return multiparam(*args)
    except Exception as e:
        logger.warning("Cannot build %s from %r: %s", multiparam.__name__, fragments, e)
        return None


def extract_multiparams(params: dict[str, Any], mappings: Iterable[Mapping]) -> dict[str, Any]:
    """Replace multiparam fragments in *params* with composed values.

    Modifies *params* in place and returns it.
    """
    for mapping in mappings:
        if mapping.multiparam is None:
            continue
        full_name = mapping.full_name
        pattern = re.compile(_FRAGMENT_PATTERN.format(name=re.escape(full_name)))
        keys = [key for key in params if isinstance(key, str) and pattern.match(key)]
        if not keys:
            continue

        fragments = {key: params.pop(key) for key in keys}
        params[full_name] = compose(mapping.multiparam, fragments, pattern)
    return params
