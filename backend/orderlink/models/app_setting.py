"""AppSetting model - small key/value store for application counters"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Text

from .base import Base


class AppSetting(Base):
    """Key/value row. Used for the order block reference counter."""
    __tablename__ = "app_setting"

    key = Column(Text, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<AppSetting(key='{self.key}', value='{self.value}')>"
