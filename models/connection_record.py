from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ConnectionRecord(BaseModel):
    """Row store record shape for one of a user's professional contacts.

    Accepts canonical column names as well as LinkedIn export headers
    ("First Name", "Connected On", ...) used by the legacy connections table.
    """

    id: str | None = None
    user_id: str | None = None
    first_name: str | None = Field(default="", validation_alias=AliasChoices("first_name", "First Name"))
    last_name: str | None = Field(default="", validation_alias=AliasChoices("last_name", "Last Name"))
    email: str | None = Field(default=None, validation_alias=AliasChoices("email", "Email Address"))
    company: str | None = Field(default=None, validation_alias=AliasChoices("company", "Company"))
    position: str | None = Field(default=None, validation_alias=AliasChoices("position", "Position"))
    location: str | None = Field(default=None, validation_alias=AliasChoices("location", "Location"))
    connected_on: str | None = Field(default=None, validation_alias=AliasChoices("connected_on", "Connected On"))
    profile_url: str | None = Field(default=None, validation_alias=AliasChoices("profile_url", "URL"))
    created_at: str | None = None

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}"
