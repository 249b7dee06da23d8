"""SQLAlchemy ORM models."""

from lumasms.models.base import Base
from lumasms.models.content import Comment, Resource
from lumasms.models.group import Group
from lumasms.models.user import User

__all__ = ["Base", "Comment", "Group", "Resource", "User"]
