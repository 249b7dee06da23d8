"""ORM model for user groups (roles) and the capabilities they grant."""

from sqlalchemy import Boolean, Column, Integer, String

from lumasms.models.base import TABLE_PREFIX, Base

# Reserved group id of the root administrators.
ROOT_GID = 1


class Group(Base):
    """
    Role a user belongs to via User.gid.

    staff_user allows editing other users and staff-only fields; staff_root is
    required to assign the root group and to delete accounts.
    """

    __tablename__ = f"{TABLE_PREFIX}groups"

    gid = Column(Integer, primary_key=True, autoincrement=True)
    group_name = Column(String(64), nullable=False)
    staff_user = Column(Boolean, nullable=False, default=False)
    staff_root = Column(Boolean, nullable=False, default=False)
