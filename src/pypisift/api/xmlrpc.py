"""PyPI XML-RPC endpoint — Serves ``pip search`` calls for each repository.

Point pip at a repository with::

    pip search --index http://localhost:8080/repository/pypi-all/pypi django
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from pypisift.adapters.base.exceptions import IndexUnavailable, UpstreamUnavailable
from pypisift.api.deps import get_service
from pypisift.core.service import PyPiSearchService, RepositoryNotFoundError
from pypisift.protocol.exceptions import MalformedDocument, UnsupportedOperation

logger = logging.getLogger(__name__)

router = APIRouter()

XML_MEDIA_TYPE = "text/xml"


@router.post(
    "/repository/{repository}/pypi",
    response_class=Response,
    summary="XML-RPC Search",
    description=(
        "Accepts an XML-RPC `search` call as sent by `pip search` and answers with "
        "an XML-RPC `methodResponse` listing matching packages.\n\n"
        "Hosted repositories are searched in the index, proxy repositories are "
        "forwarded to their remote, and group repositories merge their members."
    ),
    responses={
        200: {"description": "XML-RPC search response", "content": {XML_MEDIA_TYPE: {}}},
        400: {"description": "Malformed request, or a method, operator or key that is not supported"},
        404: {"description": "Repository is not configured"},
        502: {"description": "Remote server of a proxy repository failed"},
        503: {"description": "Search index is unavailable"},
    },
)
async def xmlrpc_search(
    repository: str,
    request: Request,
    service: PyPiSearchService = Depends(get_service),
) -> Response:
    """Execute an XML-RPC search against ``repository``."""
    body = await request.body()
    try:
        content = await service.search(repository, body)
    except RepositoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except MalformedDocument as e:
        logger.info("Rejected malformed search request for %s: %s", repository, e)
        raise HTTPException(status_code=400, detail=f"Malformed XML-RPC request: {e}") from e
    except UnsupportedOperation as e:
        logger.info("Rejected unsupported search request for %s: %s", repository, e)
        raise HTTPException(status_code=400, detail=f"Unsupported {e.kind}: {e.actual}") from e
    except UpstreamUnavailable as e:
        logger.error("Upstream search failed for %s: %s", repository, e)
        raise HTTPException(status_code=502, detail=str(e)) from e
    except IndexUnavailable as e:
        logger.error("Index search failed for %s: %s", repository, e, exc_info=True)
        raise HTTPException(status_code=503, detail=str(e)) from e

    return Response(content=content, media_type=XML_MEDIA_TYPE)
