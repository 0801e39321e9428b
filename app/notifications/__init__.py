"""
Notifications
Real-time fan-out to WebSocket subscribers and best-effort approval mail
"""

from app.notifications.events import RealtimeEvent
from app.notifications.hub import BroadcastHub, Subscriber
from app.notifications.publisher import FanoutPublisher
from app.notifications.mailer import EmailNotifier

__all__ = [
    "RealtimeEvent",
    "BroadcastHub",
    "Subscriber",
    "FanoutPublisher",
    "EmailNotifier",
]
