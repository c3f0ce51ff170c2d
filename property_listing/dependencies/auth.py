from uuid import UUID

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import httpx
from pydantic import BaseModel
from structlog import get_logger

from property_listing.context import ServiceContext
from property_listing.dependencies.services import get_context
from property_listing.utils.retry import retry_api

logger = get_logger()
security = HTTPBearer()


class CurrentUser(BaseModel):
    user_id: UUID
    email: str = ""
    role: str = ""


@retry_api(tries=3, retry_on=(httpx.TransportError,))
async def verify_token(base_url: str, token: str, timeout: float) -> httpx.Response:
    async with httpx.AsyncClient(timeout=timeout) as client:
        return await client.get(
            f"{base_url}/auth/verify",
            headers={"Authorization": f"Bearer {token}"},
        )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    ctx: ServiceContext = Depends(get_context),
) -> CurrentUser:
    settings = ctx.settings
    try:
        response = await verify_token(settings.USER_MANAGEMENT_URL, credentials.credentials, settings.AUTH_TIMEOUT_SECONDS)
    except httpx.TransportError as e:
        logger.error("auth_service_unreachable", error=str(e))
        raise HTTPException(status_code=503, detail="Authentication service unavailable")
    if response.status_code != 200:
        logger.warning("token_verification_failed", status_code=response.status_code)
        raise HTTPException(status_code=401, detail="Invalid token")
    try:
        return CurrentUser.model_validate(response.json())
    except ValueError:
        logger.warning("token_claims_invalid")
        raise HTTPException(status_code=401, detail="Invalid token claims")
