from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")
    content: str = Field(default="", max_length=1000, validate_default=True)

    @field_validator("content")
    @classmethod
    def content_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please provide comment content")
        return v
