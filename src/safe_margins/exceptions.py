# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Custom exceptions of the safe-margins bot"""


class SafeMarginsError(Exception):
    """Base exception for all errors raised by this package."""


class BotStateError(SafeMarginsError):
    """The bot reached a state in which it can't continue to operate."""


class InvalidPriceError(SafeMarginsError, ValueError):
    """A reference price is not a finite positive number."""


class PriceFeedError(SafeMarginsError):
    """The reference price could not be retrieved from the price feed."""
