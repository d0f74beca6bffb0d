from .user import User
from .qr_code import QRCode, QR_TYPES
from .scan_log import ScanLog
from .subscription import Subscription
from .webhook_events import WebhookEvent

__all__ = ["User", "QRCode", "QR_TYPES", "ScanLog", "Subscription", "WebhookEvent"]
