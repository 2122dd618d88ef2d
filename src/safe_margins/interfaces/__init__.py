# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from safe_margins.interfaces.exchange import IExchangeRESTService
from safe_margins.interfaces.notification import INotificationChannel
from safe_margins.interfaces.price_feed import IPriceFeed

__all__ = [
    "IExchangeRESTService",
    "INotificationChannel",
    "IPriceFeed",
]
