from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope wrapped around every payload."""

    status_code: int
    data: Optional[T] = None
    message: str = "Success"

    @computed_field
    @property
    def success(self) -> bool:
        return self.status_code < 400


class ApiErrorResponse(CamelModel):
    """Error envelope emitted by the exception handlers."""

    status_code: int
    message: str
    success: bool = False
    errors: List[Any] = []
