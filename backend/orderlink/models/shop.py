"""Shop model - Root entity for per-store isolation"""

from datetime import datetime, timezone
import re

from sqlalchemy import Column, Integer, Text, DateTime
from sqlalchemy.orm import validates

from .base import Base

SHOP_DOMAIN_PATTERN = re.compile(r'^[a-z0-9][a-z0-9-]*\.myshopify\.com$')


class Shop(Base):
    """
    Installed Shopify store.

    Holds the Admin API access token used for every call made on the shop's
    behalf. All other tables reference the shop by its myshopify domain.
    """
    __tablename__ = "shop"

    id = Column(Integer, primary_key=True, autoincrement=True)
    domain = Column(Text, nullable=False, unique=True)
    access_token = Column(Text, nullable=False)
    scope = Column(Text, nullable=True)
    installed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    @validates('domain')
    def validate_domain(self, key, value):
        """
        Ensure the domain is a canonical myshopify domain.

        Valid: acme.myshopify.com, acme-store-2.myshopify.com
        Invalid: Acme.myshopify.com, acme.com, https://acme.myshopify.com

        Raises:
            ValueError: If domain doesn't match the myshopify pattern
        """
        if not value or not SHOP_DOMAIN_PATTERN.match(value):
            raise ValueError(f"Invalid shop domain: {value!r}")
        return value

    @validates('access_token')
    def validate_access_token(self, key, value):
        if not value or len(value.strip()) == 0:
            raise ValueError("Access token cannot be empty")
        return value.strip()

    def __repr__(self):
        return f"<Shop(id={self.id}, domain='{self.domain}')>"
