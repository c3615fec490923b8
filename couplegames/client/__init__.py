"""Python client for the couple games API."""

from couplegames.client.api import ApiClient, ApiClientError, CatalogLoader
from couplegames.client.session_sync import SessionSynchronizer

__all__ = ['ApiClient', 'ApiClientError', 'CatalogLoader', 'SessionSynchronizer']
