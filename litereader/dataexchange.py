"""
Contains classes used for data exchange between the interface and the
components that compute results; nothing here touches the database file.
"""
from typing import Any, TypeVar, Generic, List, Optional
from dataclasses import dataclass

# This is used to parameterize Response type as per: https://stackoverflow.com/a/42989302
T = TypeVar("T")


class DatabaseError(Exception):
    """
    Root of all errors raised while reading a database file.
    Concrete errors are defined next to the code that raises them.
    """
    pass


@dataclass
class Response(Generic[T]):
    """
    Outcome of one command.
    On success, `body` holds the output; on failure `error_message`
    says why and `status` holds the error that failed the command.
    """

    success: bool
    error_message: Optional[str] = None
    status: Any = None
    body: T = None

    @classmethod
    def ok(cls, lines: List[str]) -> "Response[List[str]]":
        return cls(True, body=lines)

    @classmethod
    def failed(cls, exc: DatabaseError) -> "Response":
        return cls(False, error_message=str(exc), status=exc)

    def __str__(self):
        if self.success:
            return f"Response(success, {self.body})"
        return f"Response(fail, {self.error_message})"

    def __repr__(self):
        return self.__str__()
