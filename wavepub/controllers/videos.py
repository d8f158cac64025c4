"""Lifecycle endpoints over published videos.

Every call is a live round trip to the asset store; nothing is cached.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from wavepub.controllers.dependencies import PublisherDep
from wavepub.views import ResourceList, error_response, success_response

router = APIRouter(prefix="/videos", tags=["videos"])

logger = logging.getLogger(__name__)


def resource_id_from_path(raw: str) -> str:
    """Rejoin the path segments of a folder-qualified id with ``/``.

    Segments are kept as received; only the surrounding slashes go.
    """

    return raw.strip("/")


@router.get("")
async def list_videos(publisher: PublisherDep) -> JSONResponse:
    try:
        resources = await publisher.list()
    except Exception as exc:
        logger.exception("Listing videos failed")
        return error_response(exc, status.HTTP_400_BAD_REQUEST)
    return success_response(ResourceList(resources=resources))


@router.get("/{video_id:path}")
async def get_video(video_id: str, publisher: PublisherDep) -> JSONResponse:
    public_id = resource_id_from_path(video_id)
    try:
        resource = await publisher.get(public_id)
    except Exception as exc:
        logger.exception("Fetching video %s failed", public_id)
        return error_response(exc, status.HTTP_400_BAD_REQUEST)
    return success_response(resource)


@router.delete("/{video_id:path}")
async def delete_video(video_id: str, publisher: PublisherDep) -> JSONResponse:
    public_id = resource_id_from_path(video_id)
    try:
        result = await publisher.delete({public_id})
    except Exception as exc:
        logger.exception("Deleting video %s failed", public_id)
        return error_response(exc, status.HTTP_400_BAD_REQUEST)
    return success_response(result)
