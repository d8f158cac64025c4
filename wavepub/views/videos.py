"""Schemas for the video lifecycle endpoints."""

from pydantic import BaseModel, Field

from wavepub.domain import PublishedResource


class ResourceList(BaseModel):
    resources: list[PublishedResource] = Field(default_factory=list)
