"""Rule-string grammar and regex synthesis.

A rule string is a path template whose variables are written as
``<name>`` (required) or ``<name?>`` (optional). The declaration-time
shorthands ``:name``, ``[:name]``, ``{name}`` and ``{name?}`` are
rewritten to that form by ``normalize_rule``.

Compilation works on tokens: every ``[/-]?<?\\w+\\??>?`` run in the rule
is a token, and each token that is a variable placeholder is replaced by
a named capture group::

    "/user/<id>"      -> "/user(/(?P<id>\\d+))"          # pattern {"id": "int"}
    "/blog/<name?>"   -> "/blog(/(?P<name>[\\w\\.]+))?"
    "/<id?>/edit"     -> "(/(?P<id>[\\w\\.]+))/edit"      # )?/ normalized to )/

Literal text between tokens is left as written, so a rule may carry
regex syntax of its own.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

# Built-in pattern aliases usable as per-variable patterns
NAMED_PATTERNS: dict[str, str] = {
    "int": r"\d+",
    "float": r"\d+\.\d+",
    "alpha": r"[A-Za-z]+",
    "alphaNum": r"[A-Za-z0-9]+",
    "alphaDash": r"[A-Za-z0-9\-\_]+",
}

# Per-variable patterns whose captured values are coerced to numbers
NUMERIC_PATTERNS: dict[str, type] = {
    "int": int,
    r"\d+": int,
    "float": float,
}

_SHORTHANDS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\[:([A-Za-z_]\w*)\]"), r"<\1?>"),
    (re.compile(r":([A-Za-z_]\w*)"), r"<\1>"),
    (re.compile(r"\{([A-Za-z_]\w*)\?\}"), r"<\1?>"),
    (re.compile(r"\{([A-Za-z_]\w*)\}"), r"<\1>"),
)


def normalize_rule(rule: str) -> str:
    """Rewrite variable shorthands to the canonical ``<name>`` form.

    ``[:id]`` and ``{id?}`` become ``<id?>``; ``:id`` and ``{id}``
    become ``<id>``.
    """
    for pattern, replacement in _SHORTHANDS:
        rule = pattern.sub(replacement, rule)
    return rule


def _separators(delimiter: str) -> str:
    return re.escape("/-" + (delimiter if delimiter not in "/-" else ""))


def variable_tokens(rule: str, delimiter: str = "/") -> list[str]:
    """Return every token of *rule*, variables and literal words alike."""
    return re.findall(f"[{_separators(delimiter)}]?<?\\w+\\??>?", rule)


def literal_prefix(rule: str, delimiter: str = "/") -> str:
    """Return the literal text before the first variable of *rule*."""
    return re.split(f"[{_separators(delimiter)}]?<\\w+\\??>", rule, maxsplit=1)[0]


def resolve_pattern(
    value: str,
    named_patterns: Mapping[str, str] = NAMED_PATTERNS,
) -> str:
    """Resolve an explicit per-variable pattern to a regex fragment.

    A value that exactly names an entry of *named_patterns* is replaced
    by that entry; surrounding ``/.../`` delimiters are stripped.
    """
    if value in named_patterns:
        value = named_patterns[value]
    if len(value) > 1 and value.startswith("/") and value.endswith("/"):
        value = value[1:-1]
    return value


def _literal(separator: str) -> str:
    """Regex form of a path separator (``/`` and ``-`` need no escaping)."""
    return separator if separator in ("/", "-") else re.escape(separator)


def compile_variable(
    token: str,
    patterns: Mapping[str, str],
    default_pattern: str,
    suffix: str = "",
    named_patterns: Mapping[str, str] = NAMED_PATTERNS,
    delimiter: str = "/",
) -> str:
    """Compile one rule token into a named capture group.

    Returns ``""`` when *token* is not a variable placeholder. Otherwise
    returns ``(<prefix>(?P<name<suffix>>inner))`` with a trailing ``?``
    for optional variables. *suffix* disambiguates the group name when
    several rules are unioned into one regex. The prefix may be ``/``,
    ``-`` or the configured path *delimiter*.
    """
    prefix = ""
    name = token
    if name[:1] and name[0] in ("/", "-", delimiter):
        prefix = _literal(name[0])
        name = name[1:]

    if name[:1] != "<":
        return ""

    optional = ""
    if name.endswith("?>"):
        name = name[1:-2]
        optional = "?"
    elif name.endswith(">"):
        name = name[1:-1]
    else:
        name = name[1:]

    if name in patterns:
        inner = resolve_pattern(patterns[name], named_patterns)
    else:
        inner = default_pattern

    return f"({prefix}(?P<{name}{suffix}>{inner})){optional}"


def build_rule_regex(
    rule: str,
    tokens: Sequence[str],
    patterns: Mapping[str, str],
    options: Mapping[str, Any],
    complete_match: bool = False,
    suffix: str = "",
    *,
    default_pattern: str,
    named_patterns: Mapping[str, str] = NAMED_PATTERNS,
    delimiter: str = "/",
) -> str:
    """Assemble the regex body for a whole rule.

    The result is unanchored at the start; *complete_match* appends a
    ``$``. A rule ending in the delimiter keeps it as mandatory unless
    the ``remove_slash`` option drops it. Occurrences of a *delimiter*
    other than ``/`` and ``-`` are escaped; other literal text is left
    as written.
    """
    replacements: dict[str, str] = {}
    for token in tokens:
        value = compile_variable(
            token, patterns, default_pattern, suffix, named_patterns, delimiter
        )
        if value:
            replacements[token] = value

    separator = _literal(delimiter)
    if separator != delimiter:
        replacements.setdefault(delimiter, separator)

    has_slash = False
    if rule != delimiter:
        if options.get("remove_slash"):
            rule = rule.rstrip(delimiter)
        elif rule.endswith(delimiter):
            rule = rule.rstrip(delimiter)
            has_slash = True

    regex = rule
    if replacements:
        alternation = "|".join(re.escape(t) for t in sorted(replacements, key=len, reverse=True))
        regex = re.sub(alternation, lambda m: replacements[m.group(0)], rule)

    for sep in dict.fromkeys(("/", "-", separator)):
        regex = regex.replace(f")?{sep}", f"){sep}")

    if has_slash:
        regex += separator

    return regex + ("$" if complete_match else "")
