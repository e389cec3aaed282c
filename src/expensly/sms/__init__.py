"""Inbox access: message models, transport and permission gate."""
from .models import RawMessage
from .transport import MessageTransport, JsonInboxTransport, SmsPayload
from .permission import PermissionGate, StaticPermissionGate, PromptPermissionGate

__all__ = [
    "RawMessage",
    "MessageTransport",
    "JsonInboxTransport",
    "SmsPayload",
    "PermissionGate",
    "StaticPermissionGate",
    "PromptPermissionGate"
]
