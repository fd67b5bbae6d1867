"""Exchange-rate lookups and currency conversion.

A single GET per request against the rate provider: no retry, no fallback
source, no caching between calls. The blocking HTTP call runs in a worker
thread so a pending conversion never holds up the ledger.
"""

import asyncio
import itertools
import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

import requests

from spendwise.config import settings
from spendwise.domain import ConversionResult, ConverterState
from spendwise.functional import parse_amount

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "An error occurred. Please check your internet connection."
PROVIDER_ERROR_MESSAGE = "Unable to fetch exchange rate. Please try again later."
CURRENCY_LIST_ERROR_MESSAGE = "Error loading currency options."


class SpendwiseError(Exception):
    """Base class for errors surfaced to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RateFetchError(SpendwiseError):
    pass


def flag_url(currency_code: str, template: str = settings.FLAG_URL_TEMPLATE) -> str:
    """Flag image for a currency, guessed from its first two letters.

    Only right when those letters are a country code (USD -> US); EUR, XAF and
    friends get whatever image the flag service has, if any.
    """
    return template.format(code=currency_code[:2].upper())


class RateProvider:
    def __init__(
        self,
        api_key: str = settings.RATES_API_KEY,
        base_url: str = settings.RATES_API_URL,
        timeout: float = settings.HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def rates_url(self, base: str) -> str:
        return f"{self.base_url}/{self.api_key}/latest/{base}"

    def fetch_rates(self, base: str) -> Dict[str, float]:
        """Conversion rates keyed by target currency for one unit of ``base``."""
        try:
            r = self.session.get(self.rates_url(base), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Rate request for %s failed: %s", base, exc)
            raise RateFetchError(NETWORK_ERROR_MESSAGE) from exc

        try:
            r.raise_for_status()
            payload = r.json()
        except (requests.HTTPError, ValueError) as exc:
            logger.warning("Rate provider returned an unusable response for %s: %s", base, exc)
            raise RateFetchError(PROVIDER_ERROR_MESSAGE) from exc

        if not isinstance(payload, dict) or payload.get("result") != "success":
            logger.warning("Rate provider reported failure for %s: %r", base, payload)
            raise RateFetchError(PROVIDER_ERROR_MESSAGE)
        rates = payload.get("conversion_rates")
        if not isinstance(rates, dict):
            logger.warning("Rate provider sent no conversion_rates for %s", base)
            raise RateFetchError(PROVIDER_ERROR_MESSAGE)
        return rates

    def list_currencies(self, base: str = "USD") -> List[str]:
        try:
            return list(self.fetch_rates(base).keys())
        except RateFetchError as exc:
            raise RateFetchError(CURRENCY_LIST_ERROR_MESSAGE) from exc


def convert_amount(amount: float, rates: Dict[str, float], from_currency: str, to_currency: str) -> ConversionResult:
    rate = rates.get(to_currency)
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        logger.warning("No %s rate in the %s table", to_currency, from_currency)
        raise RateFetchError(PROVIDER_ERROR_MESSAGE)
    return ConversionResult(
        from_currency=from_currency,
        to_currency=to_currency,
        amount=amount,
        rate=float(rate),
        converted=round(amount * rate, 2),
    )


def swap_currencies(state: ConverterState) -> ConverterState:
    return replace(state, from_currency=state.to_currency, to_currency=state.from_currency)


class ConversionService:
    """Converts amounts with live rates; only the newest request gets to report.

    Every call to ``convert`` takes a sequence number. When a response arrives
    after a newer request was issued, it is dropped and ``convert`` returns None.
    """

    def __init__(self, provider: Optional[RateProvider] = None):
        self.provider = provider or RateProvider()
        self._sequence = itertools.count(1)
        self._latest = 0

    def _is_stale(self, token: int) -> bool:
        return token != self._latest

    async def convert(self, amount: float, from_currency: str, to_currency: str) -> Optional[ConversionResult]:
        token = next(self._sequence)
        self._latest = token
        try:
            rates = await asyncio.to_thread(self.provider.fetch_rates, from_currency)
        except RateFetchError:
            if self._is_stale(token):
                logger.info("Dropping failed response for superseded request %d", token)
                return None
            raise

        if self._is_stale(token):
            logger.info("Dropping stale %s->%s response (request %d, latest %d)",
                        from_currency, to_currency, token, self._latest)
            return None
        return convert_amount(amount, rates, from_currency, to_currency)

    async def swap(self, state: ConverterState) -> Tuple[ConverterState, Optional[ConversionResult]]:
        """Swap the currency slots and, when an amount is entered, convert in the new direction."""
        swapped = swap_currencies(state)
        amount = parse_amount(swapped.amount)
        if amount.is_none():
            return swapped, None
        result = await self.convert(amount.get_or_else(0.0), swapped.from_currency, swapped.to_currency)
        return swapped, result
