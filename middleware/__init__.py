# middleware/__init__.py
"""
Middlewares customizados do Portal Frota.
"""

from middleware.request_id import RequestIDMiddleware, get_request_id, REQUEST_ID_HEADER

__all__ = [
    "RequestIDMiddleware",
    "get_request_id",
    "REQUEST_ID_HEADER",
]
