from typing import Annotated, Any
from datetime import datetime
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from kempoverse.models import Category

TitleStr = Annotated[str, Field(min_length=1, max_length=255)]
UrlStr = Annotated[str, Field(max_length=2048)]

# Columns that may be omitted from a partial update but never set to null
_NOT_NULL = ("title", "category", "tags", "content_md", "references")


def _clean_title(v: str | None) -> str | None:
    if v is None:
        return v
    v2 = v.strip()
    if not v2:
        raise ValueError("title cannot be blank")
    return v2


def _clean_tags(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    tags = [t.strip() for t in v if t and t.strip()]
    if not tags:
        raise ValueError("at least one tag is required")
    return tags


class EntryCreate(BaseModel):
    title: TitleStr
    category: Category
    subcategory: str | None = None
    belts: list[str] | None = None
    tags: list[str]
    content_md: str
    references: list[UrlStr] = Field(default_factory=list)
    video_url: UrlStr | None = None
    image_urls: list[UrlStr] | None = None

    @field_validator("title")
    @classmethod
    def title_non_blank(cls, v: str | None) -> str | None:
        return _clean_title(v)

    @field_validator("tags")
    @classmethod
    def tags_non_empty(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)

    def to_columns(self) -> dict[str, Any]:
        data = self.model_dump()
        data["reference_urls"] = data.pop("references")
        return data


class EntryUpdate(BaseModel):
    """
    Partial update. A field counts as present only if the client sent it
    (tracked by pydantic in model_fields_set), so an explicit null for an
    optional column clears it while an omitted field is left untouched.
    """
    title: TitleStr | None = None
    category: Category | None = None
    subcategory: str | None = None
    belts: list[str] | None = None
    tags: list[str] | None = None
    content_md: str | None = None
    references: list[UrlStr] | None = None
    video_url: UrlStr | None = None
    image_urls: list[UrlStr] | None = None

    @field_validator("title")
    @classmethod
    def title_non_blank(cls, v: str | None) -> str | None:
        return _clean_title(v)

    @field_validator("tags")
    @classmethod
    def tags_non_empty(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)

    @model_validator(mode="after")
    def required_columns_not_null(self):
        for name in _NOT_NULL:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Only the fields that were present in the request, keyed by column name."""
        data = {name: getattr(self, name) for name in self.model_fields_set}
        if "references" in data:
            data["reference_urls"] = data.pop("references")
        return data


class EntryRead(BaseModel):
    id: str
    title: str
    category: Category
    subcategory: str | None = None
    belts: list[str] | None = None
    tags: list[str]
    content_md: str
    references: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("reference_urls", "references"),
    )
    video_url: str | None = None
    image_urls: list[str] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EntryList(BaseModel):
    entries: list[EntryRead]
    total: int
