from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import logging
import time
from typing import Mapping, Protocol

import httpx

from healthdatalab.domain.exceptions import RateUnavailableError
from healthdatalab.domain.services.currency import DEFAULT_CURRENCY, SUPPORTED_CURRENCIES


logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0


@dataclass(frozen=True)
class ExchangeRateSnapshot:
    rates: Mapping[str, Decimal]
    fetched_at: float


class RatesFetcher(Protocol):
    def fetch_rates(self) -> dict[str, Decimal]:
        ...


class FrankfurterRatesClient:
    def __init__(
        self,
        *,
        api_base: str,
        timeout_seconds: float,
        base_currency: str = DEFAULT_CURRENCY,
        currencies: Sequence[str] = SUPPORTED_CURRENCIES,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout_seconds
        self.base_currency = base_currency
        self.currencies = tuple(currencies)

    def fetch_rates(self) -> dict[str, Decimal]:
        url = f"{self.api_base}/latest"
        params = {"from": self.base_currency, "to": ",".join(self.currencies)}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(url, params=params)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RateUnavailableError("Failed to fetch exchange rates.") from exc

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict) or not rates:
            raise RateUnavailableError("Exchange rate response has no rates.")
        try:
            return {str(code).upper(): Decimal(str(value)) for code, value in rates.items()}
        except InvalidOperation as exc:
            raise RateUnavailableError("Exchange rate response is malformed.") from exc


class ExchangeRateCache:
    """Process-wide GBP exchange rates, refreshed lazily once the snapshot expires.

    The snapshot is swapped as a single object, so concurrent readers see either
    the old or the new rate set. Concurrent refreshes may both hit the API; the
    last one wins and both results are equivalent.
    """

    def __init__(self, *, rates_client: RatesFetcher, ttl_seconds: float = DEFAULT_TTL_SECONDS):
        self._rates_client = rates_client
        self.ttl_seconds = ttl_seconds
        self._snapshot: ExchangeRateSnapshot | None = None

    @property
    def snapshot(self) -> ExchangeRateSnapshot | None:
        return self._snapshot

    def _is_fresh(self, snapshot: ExchangeRateSnapshot | None, now: float) -> bool:
        return snapshot is not None and (now - snapshot.fetched_at) < self.ttl_seconds

    def refresh_if_stale(self) -> ExchangeRateSnapshot:
        snapshot = self._snapshot
        now = time.monotonic()
        if self._is_fresh(snapshot, now):
            return snapshot

        rates = self._rates_client.fetch_rates()
        snapshot = ExchangeRateSnapshot(rates=dict(rates), fetched_at=now)
        self._snapshot = snapshot
        logger.info(
            "exchange_rates: refreshed currencies=%s",
            ",".join(sorted(snapshot.rates)),
        )
        return snapshot

    def get_rate(self, currency: str) -> Decimal:
        snapshot = self.refresh_if_stale()
        rate = snapshot.rates.get(currency.upper())
        if rate is None:
            raise RateUnavailableError(f"No exchange rate available for {currency.upper()}.")
        return rate
