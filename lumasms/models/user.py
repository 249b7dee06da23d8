"""ORM model for user accounts."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from lumasms.models.base import TABLE_PREFIX, Base

# Unique index names; the store maps integrity errors back to a field through them.
USERNAME_UNIQUE_INDEX = "uq_users_username_lower"
EMAIL_UNIQUE_INDEX = "uq_users_email_lower"


class User(Base):
    """
    User account.

    username and email are unique case-insensitively (functional unique indexes);
    the stored value keeps the case the user typed. Staff capabilities come from
    the group row, ban flags live on the user row.
    """

    __tablename__ = f"{TABLE_PREFIX}users"

    uid = Column(Integer, primary_key=True, autoincrement=True)
    gid = Column(Integer, ForeignKey(f"{TABLE_PREFIX}groups.gid"), nullable=False)
    username = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)

    can_msg = Column(Boolean, nullable=False, default=True)
    can_submit = Column(Boolean, nullable=False, default=True)
    can_comment = Column(Boolean, nullable=False, default=True)

    registered_ip = Column(String(64), nullable=False, default="")
    join_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_visit = Column(DateTime(timezone=True), nullable=True)
    last_active = Column(DateTime(timezone=True), nullable=True)
    last_ip = Column(String(64), nullable=False, default="")

    group = relationship("Group", lazy="joined")

    __table_args__ = (
        Index(USERNAME_UNIQUE_INDEX, func.lower(username), unique=True),
        Index(EMAIL_UNIQUE_INDEX, func.lower(email), unique=True),
    )
