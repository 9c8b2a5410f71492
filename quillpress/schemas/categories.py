from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str = Field(default="", max_length=50, validate_default=True)
    description: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please provide a category name")
        return v

    @field_validator("description")
    @classmethod
    def description_limit(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class CategoryUpdate(CategoryCreate):
    pass
