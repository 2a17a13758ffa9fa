"""Shared HTTP client handling."""

import httpx

from repo_vetter.config import get_verify_ssl

_async_http_client: httpx.AsyncClient | None = None
_async_http_client_verify_ssl: bool | None = None


async def _get_async_http_client() -> httpx.AsyncClient:
    """Get or create a global async HTTP client with connection pooling.

    Recreates the client if SSL verification setting has changed.
    """
    global _async_http_client, _async_http_client_verify_ssl
    current_verify_ssl = get_verify_ssl()

    # Recreate client if setting changed or client is closed/None
    if (
        _async_http_client is None
        or _async_http_client.is_closed
        or _async_http_client_verify_ssl != current_verify_ssl
    ):
        # Close existing client if necessary
        if _async_http_client is not None and not _async_http_client.is_closed:
            await _async_http_client.aclose()

        _async_http_client = httpx.AsyncClient(
            verify=current_verify_ssl,
            timeout=30,
            follow_redirects=True,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        _async_http_client_verify_ssl = current_verify_ssl
    return _async_http_client


async def close_async_http_client() -> None:
    """Close the global async HTTP client. Call this when shutting down."""
    global _async_http_client, _async_http_client_verify_ssl
    if _async_http_client is not None and not _async_http_client.is_closed:
        await _async_http_client.aclose()
    _async_http_client = None
    _async_http_client_verify_ssl = None
