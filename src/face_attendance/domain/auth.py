"""Authentication outcomes."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class AttendeeResponse(BaseModel):
    """Body returned by the attendee endpoint on a success status."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str | None = Field(default=None, alias="Message")
    success: bool | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")

    @property
    def is_success(self) -> bool:
        return self.message == "Success" or self.success is True


@dataclass(frozen=True)
class Matched:
    """The face was recognized as a registered person."""

    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class NotFound:
    """The person is not registered."""


@dataclass(frozen=True)
class AuthFailure:
    """Authentication could not be completed."""

    detail: str


AuthResult = Matched | NotFound | AuthFailure
