"""Hub layer for the NaViTech spectroscopy hub.

This module provides:
- The notification state machine (NotificationRouter)
- The session facade used by applications (HubSession)
"""

from .router import NotificationRouter
from .session import HubSession

__all__ = [
    'NotificationRouter',
    'HubSession',
]
