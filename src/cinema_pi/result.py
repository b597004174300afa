"""Command results returned by the dispatcher.

Handlers never print or exit; they return one of these values and the CLI
decides how to show it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from cinema_pi.core.exceptions import CinemaError


@dataclass(frozen=True)
class Ok:
    """Command succeeded.

    Attributes:
        message: Human-readable summary (may span several lines)
        fields: Machine-readable values (positions, ids, bookmark lists...)
    """

    message: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class Error:
    """Command failed; code is one of the CinemaError codes."""

    code: str
    message: str

    @property
    def exit_code(self) -> int:
        return 1

    @classmethod
    def from_exception(cls, error: CinemaError) -> "Error":
        return cls(code=error.code, message=str(error))


@dataclass(frozen=True)
class NeedsInput:
    """Command needs one more value from the caller before it can run.

    The caller collects the value (e.g., by prompting) and dispatches the
    same command again with it as the argument.
    """

    field: str
    prompt: str
    choices: Optional[List[str]] = None

    @property
    def exit_code(self) -> int:
        return 1


CommandResult = Union[Ok, Error, NeedsInput]
