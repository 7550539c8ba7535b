from typing import Any

from pydantic import ConfigDict, Field, field_validator

from accountstore.core.db import MongoModel


class User(MongoModel):
    """Registered account keyed by email.

    Indexed on email - unique. Fields other than email and preferences
    (name, password hash, ...) are stored as given.
    """

    email: str = Field(min_length=1)
    preferences: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")

    @field_validator("preferences", mode="before")
    @classmethod
    def null_preferences_as_empty(cls, v: Any) -> Any:
        """Documents written elsewhere may store preferences as null."""
        return {} if v is None else v
