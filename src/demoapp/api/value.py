"""Value endpoint."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from .services import ServiceRegistry, ValueService

router = APIRouter()


def get_services(request: Request) -> ServiceRegistry:
    """Get the service registry the running application was composed with."""
    return request.app.state.services


def get_value_service(services: ServiceRegistry = Depends(get_services)) -> ValueService:
    """Resolve the value service for the current request."""
    return services.resolve(ValueService)


@router.get("/value", response_class=PlainTextResponse)
def get_value(service: ValueService = Depends(get_value_service)) -> str:
    """
    Get the value produced by the registered value service.

    Returns:
        The service's value as a plain-text body
    """
    return service.get_value()
