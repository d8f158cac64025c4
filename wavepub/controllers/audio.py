"""Audio submission endpoint.

For a stage-by-stage map see `wavepub.pipelines.waveform.flow`. The POST
`/audio` handler decodes the multipart body, hands the spooled file to
`WaveformPipeline.publish` and removes the spooled file once the run ends.
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from wavepub.controllers.dependencies import PipelineDep, SettingsDep
from wavepub.pipelines.waveform import DecodeFailure, decode_submission
from wavepub.views import error_response, success_response

router = APIRouter(prefix="/audio", tags=["audio"])

logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_audio(
    request: Request,
    pipeline: PipelineDep,
    app_settings: SettingsDep,
) -> JSONResponse:
    """Render the uploaded `audio` file into a waveform video and publish it."""

    try:
        submission = await decode_submission(request, app_settings.render.uploads_dir)
    except DecodeFailure as exc:
        logger.warning("Rejected submission: %s", exc)
        return error_response(exc, status.HTTP_400_BAD_REQUEST)

    try:
        result = await pipeline.publish(submission)
    except Exception as exc:
        logger.exception("Waveform pipeline failed for %s", submission.original_filename)
        return error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR)
    finally:
        submission.source_path.unlink(missing_ok=True)

    return success_response(result, status.HTTP_201_CREATED)
