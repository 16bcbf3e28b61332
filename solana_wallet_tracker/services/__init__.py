"""Service modules"""
from .aggregator import SignificanceFilter, aggregate
from .change_detector import detect_changes
from .monitor import Monitor
from .wallet_service import WalletService

__all__ = ["Monitor", "SignificanceFilter", "WalletService", "aggregate", "detect_changes"]
