"""
Errors raised by the inference layer.
"""

USAGE = "Usage: Registry.imply(list, list, *conditions, producer)"


class ImplicatorNotApplicableError(Exception):
    """
    Raised inside a rule body when the implicator cannot handle the key.

    Never reaches a Registry.get() caller: the implicator boundary turns it
    into a failed attempt and the next candidate implicator is tried.
    """

    def __init__(self, reason: str = ""):
        self.reason = reason
        message = "Implicator not applicable"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ImplicatorUsageError(TypeError):
    """Raised when an implicator is registered with malformed arguments."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = USAGE
        if detail:
            message += f" ({detail})"
        super().__init__(message)
