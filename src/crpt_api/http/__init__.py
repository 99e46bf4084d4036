"""HTTP transport layer."""

from crpt_api.http.client import HttpClient, SyncHttpClient

__all__ = ["HttpClient", "SyncHttpClient"]
