# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from abc import ABC, abstractmethod
from typing import Self


class IPriceFeed(ABC):
    """Interface for external reference price sources."""

    @abstractmethod
    def get_price(self: Self, base_currency: str, quote_currency: str) -> float:
        """Return the current reference price of base in units of quote.

        Raises PriceFeedError if the price can't be retrieved.
        """
