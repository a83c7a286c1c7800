"""
Profile Decode Errors

Fatal conditions raised while decoding a capture. Any of these rejects the
capture wholesale; no partially decoded Thread or File is returned.

Recoverable conditions (kind/data table overflow, snapshot underflow,
unresolved locations) are not errors: they degrade and are logged.
"""


class ProfileError(Exception):
    """Base class for capture decode failures."""
    pass


class SchemaMismatchError(ProfileError):
    """Raised when a table's declared column order differs from the expected order."""

    def __init__(self, table: str, column: str, expected: int, actual):
        self.table = table
        self.column = column
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{table} schema mismatch: column '{column}' expected at {expected}, got {actual!r}"
        )


class UnknownImplementationError(ProfileError):
    """Raised when a frame carries a tier string outside interpreter/baseline/ion."""

    def __init__(self, implementation: str):
        self.implementation = implementation
        super().__init__(f"Unknown implementation tag: {implementation!r}")


class StackOrderError(ProfileError):
    """Raised when a stack row references a prefix row that is not decoded yet."""
    pass


class CaptureFormatError(ProfileError):
    """Raised when the capture JSON matches neither the columnar nor the legacy shape."""
    pass
