# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Unit tests for the BotEngine class."""

import asyncio
import os
import signal
import time
from collections.abc import Callable, Generator
from unittest.mock import MagicMock, Mock, patch

import pytest

from safe_margins.core.engine import BotEngine
from safe_margins.core.state_machine import States
from safe_margins.exceptions import BotStateError
from safe_margins.models.configuration import BotConfigDTO, NotificationConfigDTO


async def wait_until(predicate: Callable[[], bool], timeout: float = 2) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture
def adapters(
    mock_rest_api: Mock,
    mock_price_feed: Mock,
) -> Generator[dict[str, MagicMock], None, None]:
    with (
        patch(
            "safe_margins.adapters.exchanges.kraken.KrakenExchangeRESTServiceAdapter",
            return_value=mock_rest_api,
        ) as rest_cls,
        patch(
            "safe_margins.adapters.price_feed.HTTPPriceFeedAdapter",
            return_value=mock_price_feed,
        ) as feed_cls,
        patch(
            "safe_margins.services.notification_service.NotificationService.notify",
        ) as notify,
    ):
        yield {
            "rest_cls": rest_cls,
            "feed_cls": feed_cls,
            "notify": notify,
        }


def make_engine(config: BotConfigDTO) -> BotEngine:
    return BotEngine(bot_config=config, notification_config=NotificationConfigDTO())


def notifications(notify: MagicMock) -> list[str]:
    return [c.args[0] for c in notify.call_args_list]


def test_engine_wires_adapters(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],
) -> None:
    make_engine(bot_config)

    adapters["rest_cls"].assert_called_once()
    assert adapters["rest_cls"].call_args.kwargs["api_public_key"] == "test_api_key"
    adapters["feed_cls"].assert_called_once_with(
        url_template=bot_config.price_feed_url,
        key=bot_config.price_feed_key,
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("public_key", "secret_key"),
    [("", "test_secret_key"), ("test_api_key", ""), ("", "")],
)
async def test_run_without_credentials_makes_no_remote_calls(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],  # noqa: ARG001
    mock_rest_api: Mock,
    mock_price_feed: Mock,
    public_key: str,
    secret_key: str,
) -> None:
    bot_config.api_public_key = public_key
    bot_config.api_secret_key = secret_key
    engine = make_engine(bot_config)

    assert await engine.run() == 1

    assert mock_rest_api.mock_calls == []
    assert mock_price_feed.mock_calls == []
    assert engine.state_machine.state == States.INITIALIZING


@pytest.mark.asyncio
async def test_run_initialization_failure(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],
    mock_rest_api: Mock,
) -> None:
    mock_rest_api.check_exchange_status.side_effect = BotStateError(
        "Could not connect to the Kraken Exchange API after 3 tries.",
    )
    engine = make_engine(bot_config)

    assert await engine.run() == 1

    assert engine.state_machine.state == States.ERROR
    mock_rest_api.get_open_orders.assert_not_called()
    mock_rest_api.create_order.assert_not_called()
    assert "Initialization failed" in notifications(adapters["notify"])[-1]


@pytest.mark.asyncio
async def test_run_ticks_immediately_until_shutdown(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],
    mock_rest_api: Mock,
) -> None:
    engine = make_engine(bot_config)
    run_task = asyncio.create_task(engine.run())

    await wait_until(lambda: mock_rest_api.create_order.call_count == 2)
    assert engine.state_machine.state == States.RUNNING
    mock_rest_api.check_exchange_status.assert_called_once()
    mock_rest_api.check_api_key_permissions.assert_called_once_with(
        base_currency="BTC",
        quote_currency="USD",
    )

    engine.state_machine.transition_to(States.SHUTDOWN_REQUESTED)

    assert await asyncio.wait_for(run_task, timeout=2) == 0
    # The interval is 60 seconds, so only the initial tick ran.
    assert mock_rest_api.create_order.call_count == 2

    messages = notifications(adapters["notify"])
    assert "is starting on BTC/USD" in messages[0]
    assert "shut down successfully" in messages[-1]


@pytest.mark.asyncio
async def test_run_repeats_ticks(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],  # noqa: ARG001
    mock_rest_api: Mock,
) -> None:
    bot_config.interval = 0.02
    bot_config.dry_run = True
    engine = make_engine(bot_config)
    run_task = asyncio.create_task(engine.run())

    await wait_until(lambda: mock_rest_api.get_pair_balance.call_count >= 3)
    engine.state_machine.transition_to(States.SHUTDOWN_REQUESTED)

    assert await asyncio.wait_for(run_task, timeout=2) == 0
    mock_rest_api.create_order.assert_not_called()


@pytest.mark.asyncio
async def test_failing_tick_keeps_running(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],  # noqa: ARG001
    mock_rest_api: Mock,
    mock_price_feed: Mock,
) -> None:
    bot_config.interval = 0.02
    mock_price_feed.get_price.side_effect = ConnectionError("price feed down")
    engine = make_engine(bot_config)
    run_task = asyncio.create_task(engine.run())

    await wait_until(lambda: mock_price_feed.get_price.call_count >= 2)
    assert engine.state_machine.state == States.RUNNING

    engine.state_machine.transition_to(States.SHUTDOWN_REQUESTED)

    assert await asyncio.wait_for(run_task, timeout=2) == 0
    mock_rest_api.create_order.assert_not_called()


@pytest.mark.asyncio
async def test_error_state_terminates_with_failure(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],  # noqa: ARG001
    mock_rest_api: Mock,
) -> None:
    engine = make_engine(bot_config)
    run_task = asyncio.create_task(engine.run())

    await wait_until(lambda: mock_rest_api.create_order.call_count == 2)
    engine.state_machine.transition_to(States.ERROR)

    assert await asyncio.wait_for(run_task, timeout=2) == 1


@pytest.mark.asyncio
async def test_shutdown_signal_during_initialization(
    bot_config: BotConfigDTO,
    adapters: dict[str, MagicMock],
    mock_rest_api: Mock,
) -> None:
    """SIGTERM while checking the exchange ends the bot without starting it"""
    mock_rest_api.check_exchange_status.side_effect = lambda: os.kill(
        os.getpid(),
        signal.SIGTERM,
    )
    mock_rest_api.check_api_key_permissions.side_effect = lambda **_: time.sleep(0.1)
    engine = make_engine(bot_config)

    assert await asyncio.wait_for(engine.run(), timeout=2) == 0

    assert engine.state_machine.state == States.SHUTDOWN_REQUESTED
    mock_rest_api.get_open_orders.assert_not_called()
    mock_rest_api.create_order.assert_not_called()
    messages = notifications(adapters["notify"])
    assert len(messages) == 1
    assert "shut down during initialization" in messages[0]
    assert messages[0].startswith("TestBot terminated.")
