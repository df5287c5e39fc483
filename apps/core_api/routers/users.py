"""
User Endpoints.

- GET /user/{user_id}: user name lookup
"""

from fastapi import APIRouter, Depends

from apps.core_api.deps import get_user_service
from apps.core_api.services.user_service import UserService
from lookout_obs.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/user/{user_id}")
async def user_name(user_id: str, user_service: UserService = Depends(get_user_service)) -> str:
    """Return the name of user `user_id`."""
    logger.info("Got a request")
    return await user_service.user_name(user_id)
