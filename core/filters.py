"""Package name filters.

A filter is one of:

- ``"/regex/"``: keep names the pattern is found in
- ``"react, react-dom lodash"``: keep the comma or space delimited names
- ``["react", "lodash"]``: keep exactly those names
"""

import re
from collections.abc import Callable

from .errors import InvalidFilterError

NameFilter = Callable[[str], bool]

_DELIMITERS = re.compile(r"[\s,]+")


def _is_regex_filter(value: str) -> bool:
    return len(value) >= 2 and value.startswith("/") and value.endswith("/")


def build_filter(spec) -> NameFilter | None:
    """Build a name predicate from a filter specification.

    Args:
        spec: Regex string, delimited string, or collection of names

    Returns:
        Predicate over package names, or None when nothing is filtered

    Raises:
        InvalidFilterError: If the specification is not a supported form
    """
    if spec is None:
        return None

    if isinstance(spec, str):
        spec = spec.strip()
        if not spec:
            return None
        if _is_regex_filter(spec):
            try:
                pattern = re.compile(spec[1:-1])
            except re.error as e:
                raise InvalidFilterError(f"Invalid packages filter regex {spec}: {e}") from e
            return lambda name: pattern.search(name) is not None

        names = frozenset(name for name in _DELIMITERS.split(spec) if name)
        return names.__contains__

    if isinstance(spec, (list, tuple, set, frozenset)) and all(isinstance(name, str) for name in spec):
        names = frozenset(spec)
        return names.__contains__

    raise InvalidFilterError(
        "Invalid packages filter. Must be a /regex/, a list, or a comma or space delimited string."
    )


def filter_dependencies(dependencies: dict[str, str], spec) -> dict[str, str]:
    """Keep only the dependencies whose names pass the filter."""
    accept = build_filter(spec)
    if accept is None:
        return dict(dependencies)
    return {name: version for name, version in dependencies.items() if accept(name)}
