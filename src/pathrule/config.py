"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, shared
read-only by every rule the router owns.
"""

from dataclasses import dataclass

from pathrule.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(default_route_pattern=r"[^/]+", complete_match=True)
    """

    # Path segment delimiter used when splitting URLs and parsing extra params
    path_delimiter: str = "/"

    # Regex for variables that have no explicit pattern
    default_route_pattern: str = r"[\w\.]+"

    # Router-wide defaults for rules that don't set these options
    complete_match: bool = False
    remove_slash: bool = False

    # Options combined with the parent group's value instead of overriding it
    merge_options: tuple[str, ...] = ("model", "append", "middleware")

    # Marks a dotted class path in string targets ("app.controllers.Blog@read")
    namespace_separator: str = "."

    # Root domain for sub-domain computation (None = last two host labels)
    root_domain: str | None = None

    def __post_init__(self) -> None:
        delimiter = self.path_delimiter
        if len(delimiter) != 1 or delimiter.isalnum() or delimiter in "_<>?{}[]:$":
            msg = (
                f"path_delimiter must be a single separator character, got {delimiter!r}"
            )
            raise ConfigurationError(msg)
