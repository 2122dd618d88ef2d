# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Unit tests for the notification adapters."""

from unittest.mock import Mock, patch

import pytest
from requests.exceptions import ConnectionError  # noqa: A004

from safe_margins.adapters.notification import TelegramNotificationChannelAdapter
from safe_margins.interfaces import INotificationChannel


@pytest.fixture
def telegram_adapter() -> TelegramNotificationChannelAdapter:
    """Create a TelegramNotificationChannelAdapter instance for testing."""
    return TelegramNotificationChannelAdapter("test_token", "test_chat_id")


class TestTelegramNotificationChannelAdapter:
    def test_implements_interface(
        self,
        telegram_adapter: TelegramNotificationChannelAdapter,
    ) -> None:
        assert isinstance(telegram_adapter, INotificationChannel)

    @patch("requests.post")
    def test_send_success(
        self,
        mock_post: Mock,
        telegram_adapter: TelegramNotificationChannelAdapter,
    ) -> None:
        mock_post.return_value = Mock(status_code=200)

        assert telegram_adapter.send("Test message") is True

        mock_post.assert_called_once_with(
            "https://api.telegram.org/bottest_token/sendMessage",
            data={"chat_id": "test_chat_id", "text": "Test message"},
            timeout=10,
        )

    @patch("requests.post")
    def test_send_plain_text(
        self,
        mock_post: Mock,
        telegram_adapter: TelegramNotificationChannelAdapter,
    ) -> None:
        """Names with markdown characters are sent as they are"""
        mock_post.return_value = Mock(status_code=200)

        assert telegram_adapter.send("safe_margins_bot: Placed *buy* order") is True

        data = mock_post.call_args.kwargs["data"]
        assert data["text"] == "safe_margins_bot: Placed *buy* order"
        assert "parse_mode" not in data

    @patch("requests.post")
    def test_send_custom_timeout(self, mock_post: Mock) -> None:
        mock_post.return_value = Mock(status_code=200)
        adapter = TelegramNotificationChannelAdapter("token", "chat", timeout=3)

        adapter.send("message")

        assert mock_post.call_args.kwargs["timeout"] == 3

    @patch("requests.post")
    def test_send_failure_bad_status_code(
        self,
        mock_post: Mock,
        telegram_adapter: TelegramNotificationChannelAdapter,
    ) -> None:
        mock_post.return_value = Mock(status_code=400, text="Bad Request")

        assert telegram_adapter.send("Test message") is False

    @patch("requests.post")
    def test_send_connection_error(
        self,
        mock_post: Mock,
        telegram_adapter: TelegramNotificationChannelAdapter,
    ) -> None:
        mock_post.side_effect = ConnectionError("Connection failed")

        assert telegram_adapter.send("Test message") is False
