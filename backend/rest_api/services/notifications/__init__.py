"""
Outbound WhatsApp notifications.

- gateway: HTTP client for the Evolution-API-compatible messaging gateway
- messages: message texts (orders, renewal reminders, welcome)
- dispatcher: best-effort, at-most-once delivery with observable outcomes
"""

from .gateway import GatewayCredentials, GatewayError, WhatsAppGateway
from .messages import build_order_message, select_order_target
from .dispatcher import (
    DispatchOutcome,
    DispatchResult,
    NotificationDispatcher,
    OutboundMessage,
    PlannedMessage,
    SkippedMessage,
    get_notification_dispatcher,
)

__all__ = [
    "GatewayCredentials",
    "GatewayError",
    "WhatsAppGateway",
    "build_order_message",
    "select_order_target",
    "DispatchOutcome",
    "DispatchResult",
    "NotificationDispatcher",
    "OutboundMessage",
    "PlannedMessage",
    "SkippedMessage",
    "get_notification_dispatcher",
]
