"""Domain value objects."""

from .result import Err, Ok, OperationError, Result
from .value_objects import ExecutionID, FeaturedImage, new_id

__all__ = [
    "Err",
    "ExecutionID",
    "FeaturedImage",
    "Ok",
    "OperationError",
    "Result",
    "new_id",
]
