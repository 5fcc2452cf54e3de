from __future__ import annotations

from healthdatalab.domain.services.currency import DEFAULT_CURRENCY


COUNTRY_TO_CURRENCY = {
    "US": "USD", "PR": "USD", "GU": "USD", "VI": "USD", "AS": "USD", "MP": "USD",
    "DE": "EUR", "FR": "EUR", "IT": "EUR", "ES": "EUR", "NL": "EUR", "BE": "EUR",
    "AT": "EUR", "PT": "EUR", "IE": "EUR", "FI": "EUR", "GR": "EUR", "SK": "EUR",
    "SI": "EUR", "EE": "EUR", "LV": "EUR", "LT": "EUR", "LU": "EUR", "MT": "EUR",
    "CY": "EUR", "HR": "EUR",
    "CH": "CHF", "LI": "CHF",
    "CA": "CAD",
    "AU": "AUD",
}


def currency_for_country(country_code: str | None) -> str:
    if not country_code:
        return DEFAULT_CURRENCY
    return COUNTRY_TO_CURRENCY.get(country_code.strip().upper(), DEFAULT_CURRENCY)
