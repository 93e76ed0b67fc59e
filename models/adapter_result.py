# ==========================
# Adapter Result
# ==========================
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar('T')

@dataclass(frozen=True)
class Success(Generic[T]):
    """Upstream call returned usable data"""
    data: T

@dataclass(frozen=True)
class Degraded:
    """
    Upstream call failed, timed out, returned a malformed body
    or the provider is not configured
    """
    reason: str

AdapterResult = Union[Success[T], Degraded]

def is_success(result: Any) -> bool:
    return isinstance(result, Success)

def unwrap_or(result: Any, default: Any) -> Any:
    """
    Data of a Success, otherwise the default
    Exceptions captured by asyncio.gather(return_exceptions=True) count as failures too
    """
    if isinstance(result, Success):
        return result.data
    return default

def describe_failure(result: Any) -> str:
    if isinstance(result, Degraded):
        return result.reason
    if isinstance(result, BaseException):
        return f"{type(result).__name__}: {str(result)[:100]}"
    return "unexpected result"
