from __future__ import annotations

from collections.abc import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from healthdatalab.domain.services.geo_currency import currency_for_country


GEO_CURRENCY_COOKIE = "hdl_geo_currency"
GEO_CURRENCY_MAX_AGE_SECONDS = 86400
GEO_CURRENCY_PATHS = ("/", "/index.html", "/personal-report", "/personal-report.html")


class GeoCurrencyMiddleware(BaseHTTPMiddleware):
    """Sets a currency cookie from the visitor's country on the pricing pages."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        country_header: str,
        paths: Iterable[str] = GEO_CURRENCY_PATHS,
    ):
        super().__init__(app)
        self._country_header = country_header
        self._paths = frozenset(paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if request.url.path not in self._paths or GEO_CURRENCY_COOKIE in request.cookies:
            return response

        currency = currency_for_country(request.headers.get(self._country_header))
        response.set_cookie(
            key=GEO_CURRENCY_COOKIE,
            value=currency,
            max_age=GEO_CURRENCY_MAX_AGE_SECONDS,
            path="/",
            samesite="lax",
        )
        return response
