"""
FastAPI dependency injection.
One Shopify client per process plus session management.
"""

from typing import Optional
from fastapi import Depends, Request, HTTPException

from .config import settings
from .auth import SessionManager
from .shopify import ShopifyClient, ShopifyPriceMutator


# Global instances (initialized on startup)
_client: Optional[ShopifyClient] = None
_session_manager: Optional[SessionManager] = None


async def init_dependencies():
    """Initialize global dependencies. Called on app startup."""
    global _client, _session_manager

    _client = ShopifyClient(
        settings.shop_domain,
        settings.access_token,
        api_version=settings.api_version,
        max_retries=settings.max_retries,
    )

    _session_manager = SessionManager(settings.session_secret)


async def close_dependencies():
    """Close global dependencies. Called on app shutdown."""
    global _client
    if _client:
        await _client.close()
        _client = None


def get_shopify_client() -> ShopifyClient:
    """Get the Shopify client instance."""
    if _client is None:
        raise RuntimeError("Shopify client not initialized")
    return _client


def get_price_mutator() -> ShopifyPriceMutator:
    """Price mutation collaborator bound to the shared client."""
    return ShopifyPriceMutator(get_shopify_client())


def get_session_manager() -> SessionManager:
    """Get the session manager instance."""
    if _session_manager is None:
        raise RuntimeError("Session manager not initialized")
    return _session_manager


async def require_auth(
    request: Request,
    session_manager: SessionManager = Depends(get_session_manager),
):
    """Dependency that rejects requests without a valid session."""
    if not session_manager.is_authenticated(request):
        raise HTTPException(status_code=401, detail="Not authenticated")
