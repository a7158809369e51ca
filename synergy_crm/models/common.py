from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class EntityPayload(BaseModel):
    """Base for request payloads: unknown keys are ignored and blank strings count as missing."""
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_blank_strings(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value for key, value in data.items()
                if not (isinstance(value, str) and not value.strip())
            }
        return data


class EntityResponse(BaseModel):
    """Base for rows read back from the database."""
    model_config = ConfigDict(from_attributes=True)
