from fastapi import APIRouter, Depends

from app.backend.core.response import to_json_response
from app.backend.dependencies.auth import verify_basic_auth
from app.backend.dependencies.services import get_user_service
from app.backend.services.user_service import UserService

user_router = APIRouter(
    prefix="/api/v1/user",
    tags=["Users"],
    dependencies=[Depends(verify_basic_auth)],
)


@user_router.get("")
def get_many_users(service: UserService = Depends(get_user_service)):
    return to_json_response(service.list_users())
