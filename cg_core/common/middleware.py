from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address
from django.utils.deprecation import MiddlewareMixin

from cg_core.common.api.exceptions import ensure_request_id


@dataclass(frozen=True)
class ClientInfo:
    ip_address: Optional[str]
    user_agent: str


def _valid_ip(value) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        validate_ipv46_address(value)
    except ValidationError:
        return None
    return value


def client_info(request) -> ClientInfo:
    """
    Network/client metadata recorded with audit entries.
    The first X-Forwarded-For hop wins over REMOTE_ADDR when it is a valid
    address; anything else falls back to REMOTE_ADDR, then to None, so a
    forged header can never make the audit insert fail.
    """
    if request is None:
        return ClientInfo(ip_address=None, user_agent="")

    cached = getattr(request, "client", None)
    if isinstance(cached, ClientInfo):
        return cached

    meta = getattr(request, "META", {}) or {}
    forwarded = (meta.get("HTTP_X_FORWARDED_FOR") or "").split(",")[0]
    ip = _valid_ip(forwarded) or _valid_ip(meta.get("REMOTE_ADDR"))

    return ClientInfo(
        ip_address=ip,
        user_agent=(meta.get("HTTP_USER_AGENT") or "")[:512],
    )


class RequestContextMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id and request.client to every request.

    - X-Request-ID from the caller is reused when present (proxy correlation).
    - The id is echoed back on the response and in every error envelope.
    """

    REQUEST_ID_META_KEY = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        incoming = (request.META.get(self.REQUEST_ID_META_KEY) or "").strip()
        if incoming:
            request.request_id = incoming[:64]
        ensure_request_id(request)

        request.client = client_info(request)
        return None

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid and not response.has_header(self.RESPONSE_HEADER):
            response[self.RESPONSE_HEADER] = rid
        return response
