"""AutologinToken model for links that sign a user in without a password."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from autologin.models import Base


class AutologinToken(Base):
    """A redeemable autologin token.

    Rows are immutable apart from ``count``. Deleting a row, either through
    the expiry sweep or by hand, invalidates the token immediately.
    """

    __tablename__ = "autologin_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String, unique=True, index=True, nullable=False)
    path = Column(Text, nullable=True)  # None means the configured default redirect
    count = Column(Integer, default=0, server_default="0", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="autologin_tokens")

    def __repr__(self) -> str:
        return f"<AutologinToken(id={self.id}, user_id={self.user_id}, count={self.count})>"
