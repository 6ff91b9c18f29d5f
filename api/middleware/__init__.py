from .request_id import RequestIDMiddleware, get_request_id
from .logging import AccessLogMiddleware

__all__ = [
    "RequestIDMiddleware",
    "AccessLogMiddleware",
    "get_request_id",
]
