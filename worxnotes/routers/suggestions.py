"""
Suggestion side-channel route.
"""
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from worxnotes.dependencies import Services, get_services
from worxnotes.errors import SuggestionError
from worxnotes.schemas.suggestion import SuggestionRequest, SuggestionResponse
from worxnotes.suggestions import FUNCTION_PATH

logger = logging.getLogger(__name__)

router = APIRouter(tags=["suggestions"])
bearer = HTTPBearer(auto_error=False)


@router.post(FUNCTION_PATH, response_model=SuggestionResponse)
async def send_suggestion(
    body: SuggestionRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    services: Services = Depends(get_services),
):
    """
    Email a user suggestion to the shop.
    """
    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), services.settings.api_key.encode()
    ):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=SuggestionResponse(success=False, error="Invalid API key").model_dump(exclude_none=True),
        )

    try:
        message_id = await services.mailer.send(body.suggestion, body.user_email)
    except SuggestionError as exc:
        logger.error("Error sending suggestion: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=SuggestionResponse(success=False, error=str(exc)).model_dump(exclude_none=True),
        )

    return SuggestionResponse(success=True, message="Suggestion sent successfully", id=message_id)
