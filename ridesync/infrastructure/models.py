"""
SQLAlchemy ORM models.

Tables
------
* ``users`` -- requester profiles; display attributes copied onto a ride
  when it is requested.  Keyed for lookup by ``email``.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from .database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    user_name = Column(String(120), nullable=False)
    school_name = Column(String(200), nullable=False)
    phone_number = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
