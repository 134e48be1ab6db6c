"""Version declaration upgrades.

A declaration such as ``^1.2.x`` is advanced toward a target version digit by
digit, keeping its leading constraint operators, its wildcards and its
precision:

- ``1.2.x`` toward ``1.3.2`` becomes ``1.3.x``
- ``>=1.2.0`` toward ``1.5.0`` becomes ``>=1.5.0``
- ``1.x.1`` toward ``2.0.1`` becomes ``2.x.1``

Range semantics (validity, satisfaction, "target is below the range") follow
npm and are evaluated with :class:`semantic_version.NpmSpec`.
"""

import logging
import re
import string

from semantic_version import NpmSpec, Version
from semantic_version.base import AllOf, AnyOf, Range

from .models import DigitOrder

logger = logging.getLogger(__name__)

WILDCARDS = ("x", "*")

_LEADING_DIGITS = re.compile(r"\d+")
# `>= 1.2.3` => `>=1.2.3`
_OPERATOR_SPACING = re.compile(r"(<=|>=|<|>|=|\^|~)\s+")
# `~>1.2` => `~1.2`
_PESSIMISTIC_TILDE = re.compile(r"~>")


def is_wild_digit(digit: str) -> bool:
    """Return True for a wildcard version component (``x`` or ``*``)."""
    return digit in WILDCARDS


def _is_constraint_char(char: str) -> bool:
    return char not in string.digits and not is_wild_digit(char)


def _leading_int(digit: str) -> int | None:
    match = _LEADING_DIGITS.match(digit)
    return int(match.group()) if match else None


def compare_digits(d1: str, d2: str) -> DigitOrder:
    """Compare two version components (e.g. the x from x.y.z).

    Args:
        d1: First component
        d2: Second component

    Returns:
        GREATER if d1 is greater, EQUAL if equal or either is a wildcard,
        LESS otherwise
    """
    if d1 == d2 or is_wild_digit(d1) or is_wild_digit(d2):
        return DigitOrder.EQUAL

    n1, n2 = _leading_int(d1), _leading_int(d2)
    if n1 is not None and n2 is not None and n1 > n2:
        return DigitOrder.GREATER
    return DigitOrder.LESS


def get_version_constraints(declaration: str) -> str:
    """Return the leading operators and whitespace of a declaration.

    Scanning stops at the first digit or wildcard, e.g. ``>= `` for
    ``>= 1.2.x`` and ``""`` for ``1.2.3``.
    """
    end = 0
    while end < len(declaration) and _is_constraint_char(declaration[end]):
        end += 1
    return declaration[:end]


def upgrade_dependency_declaration(declaration: str, latest_version: str | None) -> str:
    """Upgrade an existing dependency declaration to satisfy the latest version.

    Args:
        declaration: Current version declaration (e.g. "1.2.x")
        latest_version: Latest version (e.g. "1.3.2")

    Returns:
        The upgraded dependency declaration (e.g. "1.3.x")
    """
    # Nothing to upgrade toward
    if not latest_version:
        return declaration

    constraints = get_version_constraints(declaration)
    body = declaration[len(constraints):]
    if not body:
        return constraints

    current_components = body.split(".")
    latest_components = latest_version.split(".")
    proposed_components = []
    version_bumped = False

    for position, current_digit in enumerate(current_components):
        # Latest version is shorter, truncate the declaration to match
        if position >= len(latest_components):
            break
        new_digit = latest_components[position]

        if is_wild_digit(current_digit):
            proposed_components.append(current_digit)
            continue

        order = compare_digits(current_digit, new_digit)
        if order is DigitOrder.LESS:
            proposed_components.append(new_digit)
            version_bumped = True
        elif order is DigitOrder.GREATER and not version_bumped:
            # Declared digit is ahead of the latest release; the release wins
            proposed_components.append(new_digit)
        elif version_bumped:
            # Everything after a bump follows the latest release
            proposed_components.append(new_digit)
        else:
            proposed_components.append(current_digit)

    return constraints + ".".join(proposed_components)


def _normalize_range(expression: str) -> str:
    expression = _OPERATOR_SPACING.sub(r"\1", expression.strip())
    expression = _PESSIMISTIC_TILDE.sub("~", expression)
    return " ".join(expression.split())


def parse_range(expression: str) -> NpmSpec | None:
    """Parse an npm range expression, returning None when it is invalid."""
    try:
        return NpmSpec(_normalize_range(expression))
    except ValueError:
        return None


def is_valid_range(expression: str) -> bool:
    return parse_range(expression) is not None


def _parse_version(version: str) -> Version | None:
    try:
        return Version(version.strip())
    except ValueError:
        return None


def _bound_key(bound: tuple[Version, bool]) -> tuple[Version, bool]:
    version, inclusive = bound
    return version, not inclusive


def _lower_bound(clause) -> tuple[Version, bool] | None:
    """Lowest version a range clause admits, as (version, inclusive).

    None means the clause is unbounded below.
    """
    if isinstance(clause, Range):
        if clause.operator == Range.OP_GT:
            return clause.target, False
        if clause.operator in (Range.OP_GTE, Range.OP_EQ):
            return clause.target, True
        return None

    if isinstance(clause, AllOf):
        bounds = [bound for bound in map(_lower_bound, clause.clauses) if bound is not None]
        return max(bounds, key=_bound_key) if bounds else None

    if isinstance(clause, AnyOf):
        bounds = [_lower_bound(sub) for sub in clause.clauses]
        if not bounds or any(bound is None for bound in bounds):
            return None
        return min(bounds, key=_bound_key)

    return None


def is_below_range(version: Version, spec: NpmSpec) -> bool:
    """Return True if version is lower than every version the range admits."""
    if spec.match(version):
        return False

    bound = _lower_bound(spec.clause)
    if bound is None:
        return False

    lowest, inclusive = bound
    return version < lowest or (version == lowest and not inclusive)


def is_upgradeable(current: str, latest: str | None) -> bool:
    """Decide whether a declaration should be upgraded to the latest version.

    It should when the declaration is a valid range, the latest version does
    not already satisfy it, and the latest version is not below it.
    """
    if not latest or parse_range(current) is None:
        return False

    # Unconstrain the declaration to allow upgrades like '>1.2.x' -> '>2.0.x'
    unconstrained = current[len(get_version_constraints(current)):]
    if not unconstrained:
        return False

    spec = parse_range(unconstrained)
    if spec is None:
        logger.debug("Skipping %r: %r is not a valid range", current, unconstrained)
        return False

    target = _parse_version(latest)
    if target is None:
        # Not a full semantic version (e.g. "2.5"), so it can neither satisfy
        # nor fall below the range
        logger.debug("Cannot order %r against %r, upgrading by digits", latest, current)
        return True

    pinned = _parse_version(unconstrained)
    if pinned is not None:
        # NpmSpec("1.2.3-rc.1") also admits 1.2.3; an exact version only
        # admits itself
        is_latest = target == pinned
        is_beyond = target < pinned
    else:
        is_latest = spec.match(target)
        is_beyond = is_below_range(target, spec)
    return not is_latest and not is_beyond


def upgrade_dependencies(
    current_dependencies: dict[str, str], latest_versions: dict[str, str]
) -> dict[str, str]:
    """Upgrade a dependency collection based on the latest available versions.

    Args:
        current_dependencies: Package name -> current declaration
        latest_versions: Package name -> latest available version

    Returns:
        Package name -> upgraded declaration, for upgradeable packages only
    """
    upgraded = {}
    for name, current in current_dependencies.items():
        latest = latest_versions.get(name)
        if is_upgradeable(current, latest):
            upgraded[name] = upgrade_dependency_declaration(current, latest)
    return upgraded
