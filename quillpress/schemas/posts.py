from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PostCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")
    title: str = Field(default="", max_length=100, validate_default=True)
    content: str = Field(default="", validate_default=True)
    category: str = Field(default="", validate_default=True)
    excerpt: str | None = Field(default=None, max_length=200)
    tags: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please provide a title")
        return v

    @field_validator("content")
    @classmethod
    def content_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Please provide content")
        return v

    @field_validator("category")
    @classmethod
    def category_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please provide a category")
        return v

    @field_validator("excerpt")
    @classmethod
    def excerpt_blank(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        # Accept "a, b" as well as ["a", "b"]
        if isinstance(v, str):
            return v.split(",")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        cleaned = (t.strip() for t in v)
        tags = list(dict.fromkeys(t for t in cleaned if t))
        if any(len(t) > 50 for t in tags):
            raise ValueError("Tags cannot be more than 50 characters")
        return tags


class PostUpdate(PostCreate):
    pass
