# gate_register/schemas/result.py
"""
Result envelope returned by every Registry operation.
{success: true, data} on success, {success: false, error, error_code} otherwise.
error_code lets a UI tell a blacklist refusal apart from a stale id or a store fault.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from gate_register.utils.exceptions import GateRegisterError, ValidationError

T = TypeVar("T")


class Result(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    field: Optional[str] = None          # offending input field for validation errors

    @classmethod
    def ok(cls, data: T = None) -> "Result[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: GateRegisterError) -> "Result[T]":
        return cls(
            success=False,
            error=exc.message,
            error_code=exc.code,
            field=exc.field if isinstance(exc, ValidationError) else None,
        )
