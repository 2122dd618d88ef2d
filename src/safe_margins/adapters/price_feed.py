# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from logging import getLogger
from typing import Any, Self

import requests

from safe_margins.exceptions import PriceFeedError
from safe_margins.interfaces import IPriceFeed
from safe_margins.models.configuration import (
    DEFAULT_PRICE_FEED_KEY,
    DEFAULT_PRICE_FEED_URL,
)

LOG = getLogger(__name__)


class HTTPPriceFeedAdapter(IPriceFeed):
    """
    Retrieves a reference price from a JSON ticker endpoint.

    The URL is a template with ``{base}`` and ``{quote}`` placeholders, the key
    is a dot-separated path to the price within the response, e.g. the default
    endpoint answers with::

        {"ticker": {"base": "BTC", "target": "USD", "price": "10000.00"}, ...}
    """

    def __init__(
        self: Self,
        url_template: str = DEFAULT_PRICE_FEED_URL,
        key: str = DEFAULT_PRICE_FEED_KEY,
        timeout: float = 10,
    ) -> None:
        self.__url_template = url_template
        self.__keys = key.split(".")
        self.__timeout = timeout

    def url(self: Self, base_currency: str, quote_currency: str) -> str:
        return self.__url_template.format(base=base_currency, quote=quote_currency)

    def get_price(self: Self, base_currency: str, quote_currency: str) -> float:
        url = self.url(base_currency, quote_currency)
        LOG.debug("Requesting reference price from %s", url)
        try:
            response = requests.get(url, timeout=self.__timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.JSONDecodeError as exc:
            raise PriceFeedError(f"Response of {url} is not valid JSON") from exc
        except requests.RequestException as exc:
            raise PriceFeedError(f"Could not retrieve price from {url}: {exc}") from exc

        return self.__extract_price(payload)

    def __extract_price(self: Self, payload: Any) -> float:  # noqa: ANN401
        value = payload
        for key in self.__keys:
            if not isinstance(value, dict) or key not in value:
                raise PriceFeedError(
                    f"Price feed response has no field '{'.'.join(self.__keys)}'",
                )
            value = value[key]

        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise PriceFeedError(f"Price feed returned a non-numeric price: {value!r}") from exc
