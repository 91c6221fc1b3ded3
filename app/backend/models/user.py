from sqlmodel import SQLModel, Field
from datetime import datetime

from sqlalchemy import Column, DateTime


class User(SQLModel, table=True):
    __tablename__ = "user_encrypt"

    uuid: str = Field(primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
