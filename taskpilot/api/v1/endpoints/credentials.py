"""API endpoint reporting which credentials a request carries."""

from typing import Optional

from fastapi import APIRouter, Depends

from taskpilot.api import deps
from taskpilot.schemas.credentials import Credentials, CredentialsStatus

router = APIRouter()


@router.get("/status", response_model=CredentialsStatus)
async def credentials_status(
    credentials: Optional[Credentials] = Depends(deps.get_optional_credentials),
) -> CredentialsStatus:
    """Report whether a token and default workspace/project/user were sent."""
    return CredentialsStatus.from_credentials(credentials)
