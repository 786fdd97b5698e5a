"""API routes for service information."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from xbs.infrastructure.api.dependencies import AppContextDep
from xbs.infrastructure.api.schemas import ServiceInfoResponse, ServiceStatus

WELCOME_MESSAGE = "Welcome to xbs, the Python implementation of the xBrowserSync API"

router = APIRouter()


@router.get("/info", response_model=ServiceInfoResponse)
async def get_service_info(context: AppContextDep) -> ServiceInfoResponse:
    """Get service status, version and limits for xBrowserSync clients."""
    settings = context.settings
    return ServiceInfoResponse(
        status=ServiceStatus.ONLINE if settings.allow_new_syncs else ServiceStatus.NO_NEW_SYNCS,
        message=settings.service_message,
        version=settings.app_version,
        max_sync_size=settings.max_sync_size,
    )


@router.get("/", response_class=PlainTextResponse)
async def welcome() -> str:
    """Plain-text welcome message."""
    return WELCOME_MESSAGE
