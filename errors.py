from typing import Optional


class ProxyError(Exception):
    """Terminal failure for a single proxy request."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ServerConfigurationError(ProxyError):
    """The server is missing its Gemini API key.

    The client only ever sees the generic message; the real cause is logged.
    """

    def __init__(self, cause: str = "Gemini API key not configured."):
        super().__init__("Server configuration error.")
        self.cause = cause


class BadRequestError(ProxyError):
    status_code = 400


class UpstreamError(ProxyError):
    def __init__(self, status_code: Optional[int] = None, details=None):
        super().__init__("Failed to call the Gemini API.", status_code or 500)
        self.details = details if details is not None else "Unknown error"

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class CacheInstallError(Exception):
    """Pre-caching one of the install URLs failed, nothing was stored."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to cache {url}: {reason}")
        self.url = url
        self.reason = reason
