"""Device sync package."""

from .manager import SyncManager, SyncStatus, generate_device_code
from .remote import RemotePeer

__all__ = ["SyncManager", "SyncStatus", "generate_device_code", "RemotePeer"]
