import enum
from dataclasses import dataclass

from sqlalchemy import Column, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from sheetsync.database import Base


class AccessRight(str, enum.Enum):
    READER = "reader"
    WRITER = "writer"
    OWNER = "owner"


class Sheet(Base):
    __tablename__ = 'sheets'

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    detail = Column(Text, default="")

    accesses = relationship("UserAccessSheet", back_populates="sheet", cascade="all, delete-orphan")


class UserAccessSheet(Base):
    """Association between a user and a sheet, carrying the access right."""
    __tablename__ = 'user_access_sheet'

    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), primary_key=True)
    sheet_id = Column(Integer, ForeignKey('sheets.id', ondelete="CASCADE"), primary_key=True)
    access_right = Column(
        Enum(AccessRight, values_callable=lambda rights: [r.value for r in rights]),
        nullable=False,
        default=AccessRight.READER,
    )

    user = relationship("User", back_populates="accesses")
    sheet = relationship("Sheet", back_populates="accesses")


@dataclass(frozen=True)
class AccessGrant:
    user_id: int
    sheet_id: int
    access_right: AccessRight
