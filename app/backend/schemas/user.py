from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uuid: str
    name: str
    email: str
    created_at: datetime = Field(..., alias="createdAt")
