# rutacafe/core/rate_limit.py
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from starlette.requests import Request

from rutacafe.core.config import settings


def client_key(request: Request) -> str:
    """
    Clave del limitador: IP del cliente. La app móvil entra por el proxy del
    despliegue, así que con TRUST_PROXY_HEADERS se usa el primer salto de
    X-Forwarded-For; sin eso todos los teléfonos compartirían un cupo.
    """
    if settings.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return get_remote_address(request)


limiter = Limiter(key_func=client_key, enabled=True)
rate_limit_handler = _rate_limit_exceeded_handler
LOGIN_LIMIT = settings.login_rate_limit
