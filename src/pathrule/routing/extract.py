"""Variable extraction — turn a regex match into route variables.

Captured groups become the rule's variables. When no captured value
contains the path delimiter, the unconsumed tail of the URL is read as
``name/value`` pairs and merged in (``user/<id>`` matched against
``user/42/page/2`` yields ``{"id": 42, "page": "2"}``). Variables whose
pattern is ``int``, ``\\d+`` or ``float`` are converted to numbers.
"""

import re
from collections.abc import Mapping
from typing import Any

from pathrule._internal.types import Options, PatternMap
from pathrule.routing.patterns import NUMERIC_PATTERNS

# Synthetic keys carrying module/controller/action context, never surfaced
RESERVED_VARS = frozenset({"__module__", "__controller__", "__action__"})

_PAIR = re.compile(r"(\w+)/([^/]+)")
_TAG = re.compile(r"<[^>]*(?:>|$)")


def strip_tags(value: str) -> str:
    """Remove HTML tags (including an unterminated trailing one)."""
    return _TAG.sub("", value)


def parse_url_params(url: str) -> dict[str, str]:
    """Parse ``name/value/name/value`` pairs, tag-stripping the values."""
    if not url:
        return {}
    return {name: strip_tags(value) for name, value in _PAIR.findall(url)}


def extra_params(rule: str, url: str, delimiter: str = "/") -> dict[str, str]:
    """Parse the part of *url* past the segments *rule* consumes."""
    consumed = rule.count("/") + 1
    rest = url.split(delimiter)[consumed:]
    return parse_url_params("/".join(rest))


def coerce(value: Any, pattern: str | None) -> Any:
    """Convert *value* to int/float when *pattern* is a numeric pattern."""
    target = NUMERIC_PATTERNS.get(pattern) if isinstance(pattern, str) else None
    if target is None or not isinstance(value, str):
        return value
    try:
        return target(value)
    except ValueError:
        return value


def extract_vars(
    groups: Mapping[str, str | None],
    *,
    rule: str,
    url: str,
    patterns: PatternMap,
    options: Options,
    delimiter: str = "/",
) -> dict[str, Any]:
    """Build the variable mapping for one successful match.

    Args:
        groups: Named groups from the rule regex (unmatched optional
            groups are ``None`` and dropped).
        rule: The normalized rule string, used to count consumed segments.
        url: The URL the rule was matched against, without a leading slash.
        patterns: Effective per-variable patterns.
        options: Effective options (``default`` supplies fallback values).
        delimiter: Path segment delimiter.

    Returns:
        A fresh dict, ordered as captured, then extra params, then defaults.
    """
    found: dict[str, Any] = {k: v for k, v in groups.items() if v is not None}

    if not any(delimiter in v for v in found.values()):
        found.update(extra_params(rule, url, delimiter))

    default = options.get("default")
    if isinstance(default, Mapping):
        for name, value in default.items():
            found.setdefault(name, value)

    return {
        name: coerce(value, patterns.get(name))
        for name, value in found.items()
        if name not in RESERVED_VARS
    }
