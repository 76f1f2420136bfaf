"""
Notification Module

This module posts workflow messages to the chat platform.
"""

from src.notify.exceptions import NotificationError
from src.notify.gateway import DeliveryReceipt, LogGateway, SlackGateway, build_gateway

__all__ = ['NotificationError', 'DeliveryReceipt', 'LogGateway', 'SlackGateway', 'build_gateway']
