"""Result types for git operations that can fail without raising."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


class Ok(Generic[T]):
    """Successful result carrying a value."""

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self):
        raise ValueError(f"Called unwrap_err on Ok value: {self.value!r}")

    def unwrap_or(self, default: T) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ok) and other.value == self.value


class Err(Generic[E]):
    """Failed result carrying an error."""

    __slots__ = ("error",)

    def __init__(self, error: E) -> None:
        self.error = error

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise ValueError(f"Called unwrap on Err value: {self.error}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default):
        return default

    def __repr__(self) -> str:
        return f"Err({self.error!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Err) and other.error == self.error


@dataclass(frozen=True)
class GitOperationError:
    """Details of a git command that exited with a non-zero status."""

    operation: str
    message: str
    command: Optional[str] = None
    returncode: Optional[int] = None
    stderr: Optional[str] = None

    def __str__(self) -> str:
        parts = [f"{self.operation}: {self.message}"]
        if self.command:
            parts.append(f"command: {self.command}")
        if self.returncode is not None:
            parts.append(f"exit code: {self.returncode}")
        if self.stderr:
            parts.append(self.stderr)
        return "\n".join(parts)


GitResult = Union[Ok[T], Err[GitOperationError]]
