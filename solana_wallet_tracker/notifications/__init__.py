"""Notification channels for wallet alerts and logs."""
from .email import EmailNotifier
from .telegram import TelegramNotifier, split_message

__all__ = ["EmailNotifier", "TelegramNotifier", "split_message"]
