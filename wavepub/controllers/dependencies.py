"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from wavepub.config.settings import Settings
from wavepub.pipelines.waveform import WaveformPipeline
from wavepub.services.publisher import AssetPublisher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_publisher(request: Request) -> AssetPublisher:
    """Return the publisher built once by the application factory."""

    return request.app.state.publisher


def get_pipeline(request: Request) -> WaveformPipeline:
    return request.app.state.pipeline


SettingsDep = Annotated[Settings, Depends(get_settings)]
PublisherDep = Annotated[AssetPublisher, Depends(get_publisher)]
PipelineDep = Annotated[WaveformPipeline, Depends(get_pipeline)]


__all__ = [
    "get_settings",
    "get_publisher",
    "get_pipeline",
    "SettingsDep",
    "PublisherDep",
    "PipelineDep",
]
