"""Signup submission endpoint for the coming-soon page."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.core.deps import SignupServiceDep
from app.core.rate_limit import get_client_ip
from app.schemas.common import SubscribeResponse

router = APIRouter(tags=["subscribe"])


@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    responses={
        400: {"model": SubscribeResponse},
        429: {"model": SubscribeResponse},
        500: {"model": SubscribeResponse},
    },
)
async def subscribe(request: Request, service: SignupServiceDep) -> JSONResponse:
    """
    Register an email signup.

    Accepts a JSON object with ``email`` and ``consent`` plus optional
    ``name``, ``timestamp``, ``userAgent`` and ``referrer``.
    """
    raw_body = await request.body()
    outcome = await service.handle(raw_body, get_client_ip(request))
    return JSONResponse(status_code=outcome.status_code, content=outcome.body())
