"""
Ungated NIH RePORTER passthrough: no account, no quota, caller controls paging and sort.
"""
import logging

import requests
from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from app.dependencies.services import get_search_client
from app.schemas.actions import ProjectSearchRequest
from app.services.nih_reporter import DEFAULT_SORT_FIELD, DEFAULT_SORT_ORDER, NihReporterClient, build_criteria

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_LIMIT = 25
MAX_LIMIT = 100


@router.post("/search")
def search_projects(
    request: ProjectSearchRequest,
    client: NihReporterClient = Depends(get_search_client),
):
    limit = request.limit if request.limit is not None else DEFAULT_LIMIT
    limit = min(max(limit, 1), MAX_LIMIT)
    offset = max(request.offset or 0, 0)

    payload = {
        "criteria": build_criteria(request.criteria),
        "sort_field": request.sort_field or DEFAULT_SORT_FIELD,
        "sort_order": request.sort_order or DEFAULT_SORT_ORDER,
        "offset": offset,
        "limit": limit,
    }

    try:
        status_code, body = client.search_raw(payload)
    except requests.RequestException as e:
        logger.error("NIH RePORTER passthrough failed: %s", e)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e) or "bad request"})

    return Response(content=body, status_code=status_code, media_type="application/json")
