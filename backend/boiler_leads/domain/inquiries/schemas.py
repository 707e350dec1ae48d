from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from boiler_leads.domain.errors import SubmissionValidationError

DEFAULT_SELECTED_MODEL = "unsure"
SelectedModel = Literal["unsure", "2000", "4000", "8000"]

NAME_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 20
POSTCODE_MAX_LENGTH = 10
REF_MAX_LENGTH = 50
EPC_MAX_LENGTH = 5
SOURCE_MAX_LENGTH = 50
NOTES_MAX_LENGTH = 2000
PAGE_MAX_LENGTH = 50
USER_AGENT_MAX_LENGTH = 1024
IP_MAX_LENGTH = 45


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InquiryCreate(CamelModel):
    """Input contract for a lead-capture form submission.

    ``id`` and ``createdAt`` are assigned by the store; unknown keys, those two
    included, are dropped rather than rejected.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    phone: str = Field(..., min_length=1, max_length=PHONE_MAX_LENGTH)
    postcode: str = Field(..., min_length=1, max_length=POSTCODE_MAX_LENGTH)
    email: Optional[EmailStr] = None
    selected_model: Optional[SelectedModel] = None
    notes: Optional[str] = Field(
        default=None,
        max_length=NOTES_MAX_LENGTH,
        validation_alias=AliasChoices("notes", "message"),
    )
    ref: Optional[str] = Field(default=None, max_length=REF_MAX_LENGTH)
    epc: Optional[str] = Field(default=None, max_length=EPC_MAX_LENGTH)
    source: Optional[str] = Field(default=None, max_length=SOURCE_MAX_LENGTH)

    @field_validator("name", "phone", "postcode", mode="before")
    @classmethod
    def reject_blank_text(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            raise ValueError("field cannot be empty")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("selected_model", "notes", "ref", "epc", "source", mode="before")
    @classmethod
    def blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class VisitCreate(CamelModel):
    model_config = ConfigDict(extra="ignore")

    page: str = Field(..., min_length=1, max_length=PAGE_MAX_LENGTH)
    ref: Optional[str] = Field(default=None, max_length=REF_MAX_LENGTH)
    epc: Optional[str] = Field(default=None, max_length=EPC_MAX_LENGTH)
    user_agent: Optional[str] = Field(default=None, max_length=USER_AGENT_MAX_LENGTH)
    ip: Optional[str] = Field(default=None, max_length=IP_MAX_LENGTH)

    @field_validator("page", mode="before")
    @classmethod
    def reject_blank_page(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            raise ValueError("field cannot be empty")
        return value

    @field_validator("ref", "epc", "user_agent", "ip", mode="before")
    @classmethod
    def blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@dataclass(frozen=True)
class RequestMetadata:
    """Request facts observed by the server, never taken from the body."""

    user_agent: str | None = None
    ip: str | None = None


class InquiryResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    phone: str
    postcode: str
    email: Optional[str] = None
    selected_model: Optional[str] = None
    notes: Optional[str] = None
    ref: Optional[str] = None
    epc: Optional[str] = None
    source: Optional[str] = None
    created_at: datetime


class VisitRecord(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    page: str
    ref: Optional[str] = None
    epc: Optional[str] = None
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    created_at: datetime


class VisitAccepted(BaseModel):
    ok: bool = True


ModelT = TypeVar("ModelT", bound=BaseModel)


def format_validation_errors(exc: ValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        loc = error.get("loc", ())
        field = ".".join(str(part) for part in loc) or "body"
        errors.append({"field": field, "message": error.get("msg", "Invalid value")})
    return errors


def _validate(model: Type[ModelT], raw: Any) -> ModelT:
    if not isinstance(raw, dict):
        raise SubmissionValidationError(
            errors=[{"field": "body", "message": "Expected a JSON object"}]
        )
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise SubmissionValidationError(errors=format_validation_errors(exc)) from exc


def validate_inquiry(raw: Any) -> InquiryCreate:
    return _validate(InquiryCreate, raw)


def validate_visit(raw: Any) -> VisitCreate:
    return _validate(VisitCreate, raw)
