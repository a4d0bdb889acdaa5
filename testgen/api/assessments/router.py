from __future__ import annotations

import re
from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from testgen.api.assessments.schemas import AssessmentRequest
from testgen.services.assessment_generator import generate_assessment
from testgen.services.errors import AssessmentGenerationError, InvalidRequestError, RateLimitExceeded


router = APIRouter(prefix="/assessments", tags=["assessments"])


def _content_disposition(filename: str) -> str:
    # The quoted filename parameter is ASCII only; filename* carries the real name.
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.post("/generate")
async def generate_assessment_endpoint(request: AssessmentRequest) -> Response:
    try:
        result = await run_in_threadpool(
            generate_assessment,
            topic=request.topic,
            source_text=request.source_text,
            grade=request.grade,
            lesson=request.lesson,
            kind_counts=request.kind_counts(),
            output_format=request.output_format,
        )
    except RateLimitExceeded as exc:
        raise HTTPException(status_code=429, detail=str(exc)) from exc
    except InvalidRequestError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except AssessmentGenerationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    artifact = result.artifact
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": _content_disposition(artifact.filename)},
    )
