"""Protocol interfaces for the wallet tracker."""
from .indexer import IndexerClient
from .notifier import Notifier
from .token_resolver import TokenResolver

__all__ = ["IndexerClient", "Notifier", "TokenResolver"]
