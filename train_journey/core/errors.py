from __future__ import annotations


class InvalidTransition(ValueError):
    """An operation was invoked in a phase (or situation) that does not allow it.

    The journey state is left untouched when this is raised.
    """

    def __init__(self, operation: str, phase: str, message: str | None = None) -> None:
        self.operation = operation
        self.phase = phase
        super().__init__(message or f"Operation '{operation}' not allowed in phase '{phase}'")


class ExitNotPermitted(InvalidTransition):
    """Exit was requested on a route whose policy forbids leaving here."""


class JourneyNotFound(ValueError):
    def __init__(self, message: str = "Journey not found") -> None:
        super().__init__(message)


class JourneyBusy(ValueError):
    """Another operation holds the journey's lock."""

    def __init__(self, message: str = "Journey is busy") -> None:
        super().__init__(message)
