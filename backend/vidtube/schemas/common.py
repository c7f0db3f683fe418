from typing import Annotated, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StringConstraints, computed_field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Surrounding whitespace is stripped before the length check
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Uniform success envelope: {data, statusCode, success, message}."""

    data: T | None = None
    status_code: int = 200
    message: str = "Success"

    @computed_field
    @property
    def success(self) -> bool:
        return self.status_code < 400


def api_response(data=None, message: str = "Success", status_code: int = 200) -> ApiResponse:
    return ApiResponse(data=data, status_code=status_code, message=message)


class OwnerSummary(CamelModel):
    id: UUID
    username: str
    full_name: str
    avatar: str
