"""
Tagged results for expected failures.

Managers return ``Ok(data)`` or ``Err(OperationError)`` instead of
raising, so callers handle both branches explicitly:

    result = await site_manager.create(slug, title, email)
    if isinstance(result, Err):
        ...  # result.error.code is an ErrorCode
    else:
        ...  # result.data
"""
from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar, Union

from ..enums import ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class OperationError:
    code: ErrorCode
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message}


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: OperationError

    @property
    def success(self) -> bool:
        return False

    @classmethod
    def of(cls, code: ErrorCode, message: str) -> "Err":
        return cls(OperationError(code=code, message=message))


Result = Union[Ok[T], Err]
