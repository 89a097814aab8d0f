"""
Error taxonomy for the catalog proxy.

Each error carries the HTTP status the API layer maps it to.
"""


class CatalogProxyError(Exception):
    http_status = 500


class ValidationError(CatalogProxyError):
    """Bad input to store registration"""
    http_status = 400


class TenantNotFound(CatalogProxyError):
    http_status = 404

    def __init__(self, shop: str):
        self.shop = shop
        super().__init__(f"Store {shop} not found or missing access token")


class AuthError(CatalogProxyError):
    """Upstream rejected the stored access token"""
    http_status = 401

    def __init__(self, shop: str, detail: str = ""):
        self.shop = shop
        message = f"Invalid API key or access token for {shop}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class UpstreamError(CatalogProxyError):
    """Upstream returned an error payload or a response we cannot decode"""
    http_status = 500


class TransportError(UpstreamError):
    """Network-level failure talking to the upstream API"""
