from __future__ import annotations

import logging

from app.backend.core.exceptions import AppError, InternalServerError
from app.backend.core.response import Response, error_response, success_response
from app.backend.repositories.user import UserRepository
from app.backend.schemas.user import UserResponse

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    def list_users(self) -> Response:
        try:
            users = self.repository.find_many_users()
        except AppError:
            logger.exception("list users failed")
            return error_response(InternalServerError())

        return success_response(
            [UserResponse(uuid=u.uuid, name=u.name, email=u.email, created_at=u.created_at) for u in users]
        )
