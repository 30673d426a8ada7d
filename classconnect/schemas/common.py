"""Base schema and shapes shared by several resources."""

from datetime import datetime
from typing import Annotated, Any, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from classconnect.errors import BadRequest, FieldError, classify_validation_errors
from classconnect.models._common import as_utc


SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Timestamps always leave the API as timezone-aware UTC.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Serialises snake_case attributes as camelCase JSON fields.

    Input accepts either spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserSummary(CamelModel):
    id: str
    name: str
    email: str
    avatar_url: Optional[str] = None


class AttachmentOut(CamelModel):
    id: str
    file_name: str
    file_size: int
    file_type: str
    file_url: str


class MessageResponse(CamelModel):
    message: str


def strip_required(value: Any) -> Any:
    if value is None:
        raise FieldError("Missing required fields", "MISSING_FIELDS")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise FieldError("Missing required fields", "MISSING_FIELDS")
    return value


def parse_schema(schema: Type[SchemaT], data: dict[str, Any]) -> SchemaT:
    """Validate ``data`` (usually multipart form fields) into ``schema``.

    Failures become the same 400 envelope JSON bodies get.
    """

    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        message, code = classify_validation_errors(exc.errors())
        raise BadRequest(message, code=code) from exc
