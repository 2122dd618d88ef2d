# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from logging import getLogger
from typing import Self

import requests

from safe_margins.interfaces import INotificationChannel

LOG = getLogger(__name__)


class TelegramNotificationChannelAdapter(INotificationChannel):
    """
    Sends notifications as plain text through the Telegram Bot API.

    No parse mode is set, bot names and transaction IDs may contain
    characters that Telegram's markdown would reject.
    """

    def __init__(
        self: Self,
        bot_token: str,
        chat_id: str,
        timeout: float = 10,
    ) -> None:
        self.__chat_id = chat_id
        self.__url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        self.__timeout = timeout

    def send(self: Self, message: str) -> bool:
        LOG.debug("Sending Telegram notification: %s", message)
        try:
            response = requests.post(
                self.__url,
                data={"chat_id": self.__chat_id, "text": message},
                timeout=self.__timeout,
            )
        except requests.RequestException as exc:
            LOG.error("Failed to send Telegram notification: %s", exc)
            return False

        if response.status_code != 200:  # noqa: PLR2004
            LOG.error(
                "Telegram rejected the notification (%d): %s",
                response.status_code,
                response.text,
            )
            return False
        return True
