"""Pydantic v2 models for the JSON bodies returned by the font routes."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump to a JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class FontDescriptor(_ApiModel):
    """One font folder as shown by the listing route."""

    id: str
    font_family: str = Field(alias="fontFamily")
    css_url: str = Field(alias="cssUrl")
    created_at: datetime = Field(alias="createdAt")


class FontMetadata(_ApiModel):
    """Name-table details read from an uploaded font file."""

    family: str = ""
    style: str = ""
    full_name: str = Field(default="", alias="fullName")
    designer: str = ""
    license: str = ""


class UploadResult(_ApiModel):
    message: str = "Upload and processing complete"
    font_id: str = Field(alias="fontId")
    font_family: str = Field(alias="fontFamily")
    slug: str
    css_url: str = Field(alias="cssUrl")
    logs: str = ""
    metadata: FontMetadata | None = None


class SyncReport(_ApiModel):
    """Outcome of the best-effort git commit/push step."""

    committed: bool = False
    pushed: bool = False
    warnings: list[str] = []


class ReleaseResult(_ApiModel):
    success: bool = True
    css_url: str = Field(alias="cssUrl")
    readme_updated: bool = Field(default=False, alias="readmeUpdated")
    sync_warnings: list[str] = Field(default_factory=list, alias="syncWarnings")

    @field_validator("css_url")
    @classmethod
    def css_url_absolute(cls, v: str) -> str:
        if not v.startswith("/"):
            msg = f"cssUrl must be an absolute path, got {v!r}"
            raise ValueError(msg)
        return v


class DeleteResult(_ApiModel):
    success: bool = True
    readme_updated: bool = Field(default=False, alias="readmeUpdated")
    sync_warnings: list[str] = Field(default_factory=list, alias="syncWarnings")
