"""Error types raised by the bridgechain generator."""
from typing import List, NamedTuple, Tuple


class BridgechainError(Exception):
    """Base class for every fatal generator error."""

    exit_code = 1


class ParameterValidationError(BridgechainError):
    """Raised when the supplied parameters are malformed or out of range.

    Args:
        errors: One ``(field, message)`` pair per rejected field
    """

    exit_code = 1

    def __init__(self, errors: List[Tuple[str, str]]):
        self.errors = list(errors)
        details = "; ".join(f"{field}: {message}" for field, message in self.errors)
        super().__init__(f"Invalid parameters: {details}")

    @classmethod
    def from_pydantic(cls, exc) -> "ParameterValidationError":
        """Flatten a pydantic ``ValidationError`` into per-field messages."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
            errors.append((field, error.get("msg", "invalid value")))
        return cls(errors)


class PreconditionError(BridgechainError):
    """Destination exists without overwrite consent, or a template root is missing."""

    exit_code = 2


class EntropyFailure(BridgechainError):
    """Secure randomness was unavailable while deriving wallets."""

    exit_code = 3


class GenesisError(BridgechainError):
    """The assembled genesis state broke one of its own invariants."""

    exit_code = 3


class PatchRuleMiss(NamedTuple):
    """A patch rule that matched nothing. Logged, never raised."""

    file: str
    rule: str
