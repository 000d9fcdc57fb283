"""Shared type aliases used across pathrule modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Route target: a callable, a (class, method) pair, a Dispatch subclass, or a string
RouteTarget: TypeAlias = Any

# Custom admission predicate called with (rule, request); False rejects
MatchPredicate: TypeAlias = Callable[..., Any]

# Open option mapping attached to a rule or group
Options: TypeAlias = Mapping[str, Any]

# Variable name -> named pattern alias or raw regex fragment
PatternMap: TypeAlias = Mapping[str, str]
