"""Errors raised by the configuration resolver."""


class PersistenceError(RuntimeError):
    """A configuration write (override or volatile value) failed."""

    def __init__(self, operation: str, key: str | None, cause: Exception) -> None:
        self.operation = operation
        self.key = key
        self.cause = cause
        target = f" for '{key}'" if key else ""
        super().__init__(f"Failed to {operation}{target}: {cause}")


class LookupDepthExceededError(RecursionError):
    """The property-source chain was re-entered deeper than allowed."""

    def __init__(self, key: str, depth: int, max_depth: int) -> None:
        self.key = key
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"Property lookup for '{key}' exceeded depth {max_depth} (depth={depth})"
        )
