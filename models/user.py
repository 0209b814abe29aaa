from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, DateTime, String, func

from models.base import Base


class User(Base):
    __tablename__ = 'users'

    # Accounts are created and authenticated by the login flow; orders only reference them
    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=True)
    registered_at = Column(DateTime, default=func.now())


class UserDTO(BaseModel):
    id: int | None = None
    email: str | None = None
    name: str | None = None
    registered_at: datetime | None = None
