"""API client for VTEX MasterData."""

from .rest_client import MasterDataClient, get_scroll_token

__all__ = ["MasterDataClient", "get_scroll_token"]
