import hashlib

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship, validates

from sheetsync.database import Base


def make_password_hash(password: str) -> str:
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String, unique=True, index=True, nullable=False)
    mail = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
    password_hash = Column(String, nullable=False)

    accesses = relationship("UserAccessSheet", back_populates="user", cascade="all, delete-orphan")

    @validates('password_hash')
    def hash_password(self, key, password):
        """Hash the plain password with SHA-256 before it reaches the database."""
        return make_password_hash(password)

    def check_password(self, password: str) -> bool:
        return make_password_hash(password) == self.password_hash


class UserCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    login: str
    mail: str
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    password: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    login: str
    mail: str
    first_name: str | None = Field(default=None, serialization_alias="firstName")
    last_name: str | None = Field(default=None, serialization_alias="lastName")
