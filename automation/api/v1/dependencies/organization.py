"""Organization scope dependency."""

from fastapi import HTTPException, Request

from automation.core.config import get_settings
from automation.core.organization_validation import is_valid_organization_id_format


async def get_organization_id(request: Request) -> str:
    """Read the organization id from the configured header and check its format.

    The id is opaque here: it scopes every query but is not looked up.
    """
    name = get_settings().organization_header_name
    value = request.headers.get(name)
    if not value:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required header: {name}",
        )
    if not is_valid_organization_id_format(value):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid organization id in header: {name}",
        )
    return value
