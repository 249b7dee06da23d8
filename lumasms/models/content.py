"""Read-only views of content tables owned by the submission subsystem (used for per-user counts)."""

from sqlalchemy import Column, Integer

from lumasms.models.base import TABLE_PREFIX, Base

# Resources with this queue code are accepted (publicly listed) submissions.
QUEUE_ACCEPTED = 0


class Comment(Base):
    """Comment row; only the author link is mapped."""

    __tablename__ = f"{TABLE_PREFIX}comments"

    cid = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(Integer, nullable=False, index=True)


class Resource(Base):
    """Submitted resource; only the author link and moderation queue are mapped."""

    __tablename__ = f"{TABLE_PREFIX}resources"

    rid = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(Integer, nullable=False, index=True)
    queue_code = Column(Integer, nullable=False, default=QUEUE_ACCEPTED)
