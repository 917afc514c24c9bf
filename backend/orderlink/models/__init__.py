"""SQLAlchemy Models for OrderLink"""

from .base import Base
from .shop import Shop
from .order_block import OrderBlock
from .draft_order_link import DraftOrderLink
from .app_setting import AppSetting
from .audit_log import AuditLog

__all__ = [
    "Base",
    "Shop",
    "OrderBlock",
    "DraftOrderLink",
    "AppSetting",
    "AuditLog",
]
