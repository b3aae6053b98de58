"""Exceptions raised while converting a PLC project export."""

from typing import Any


class PlcDiffError(Exception):
    """Base class for every fatal condition of a conversion.

    Extra keyword arguments are kept in ``context`` and rendered into the
    message so the defect can be located in the source document.
    """

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class TransportError(PlcDiffError):
    """The input could not be read or is not well-formed XML."""


class CapacityError(PlcDiffError):
    """An identifier, address or symbol exceeds its maximum length."""


class StructuralError(PlcDiffError):
    """The Grafcet network violates the structure of the control-flow model."""


class InvariantError(PlcDiffError):
    """The transform pass went out of step with the collection pass."""


class PassError(PlcDiffError):
    """A processing pass failed; the original error is chained as ``__cause__``."""
