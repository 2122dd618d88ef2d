#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# GitHub: https://github.com/btschwertfeger
#

import sys
from logging import DEBUG, INFO, WARNING, basicConfig, getLogger
from typing import Any

from click import FLOAT, INT, STRING, Context, echo, pass_context
from cloup import Choice, HelpFormatter, HelpTheme, Style, group, option

from safe_margins.models.configuration import (
    DEFAULT_PRICE_FEED_KEY,
    DEFAULT_PRICE_FEED_URL,
)

HELP_THEME = HelpFormatter.settings(
    theme=HelpTheme(
        invoked_command=Style(fg="bright_yellow"),
        heading=Style(fg="bright_white", bold=True),
        constraint=Style(fg="magenta"),
        col1=Style(fg="bright_yellow"),
    ),
)


def print_version(ctx: Context, param: Any, value: Any) -> None:  # noqa: ANN401, ARG001
    """Prints the version of the package"""
    if not value or ctx.resilient_parsing:
        return
    from importlib.metadata import (  # noqa: PLC0415 # pylint: disable=import-outside-toplevel
        version,
    )

    echo(version("safe-margins"))
    ctx.exit()


def ensure_larger_than_zero(
    ctx: Context,
    param: Any,  # noqa: ANN401
    value: Any,  # noqa: ANN401
) -> Any:  # noqa: ANN401
    """Ensure the value is larger than 0"""
    if value is not None and value <= 0:
        ctx.fail(f"Value for option '{param.name}' must be larger than 0")
    return value


def ensure_ratio(
    ctx: Context,
    param: Any,  # noqa: ANN401
    value: Any,  # noqa: ANN401
) -> Any:  # noqa: ANN401
    """Ensure the value is within (0, 1)"""
    if not 0 < value < 1:
        ctx.fail(f"Value for option '{param.name}' must be between 0 and 1")
    return value


def ensure_percentage(
    ctx: Context,
    param: Any,  # noqa: ANN401
    value: Any,  # noqa: ANN401
) -> Any:  # noqa: ANN401
    """Ensure the value is within (0, 1]"""
    if not 0 < value <= 1:
        ctx.fail(f"Value for option '{param.name}' must be larger than 0 and at most 1")
    return value


@group(
    context_settings={
        "auto_envvar_prefix": "SAFE_MARGINS",
        "help_option_names": ["-h", "--help"],
    },
    formatter_settings=HELP_THEME,
    no_args_is_help=True,
)
@option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
)
@option(
    "--api-public-key",
    required=True,
    help="The API public key of the exchange",
    type=STRING,
)
@option(
    "--api-secret-key",
    required=True,
    type=STRING,
    help="The API secret key of the exchange",
)
@option(
    "-v",
    "--verbose",
    count=True,
    help="Increase the verbosity of output. Use -vv for even more verbosity.",
)
@option(
    "--dry-run/--live",
    default=True,
    show_default=True,
    help="Only compute and log the orders. Use --live to actually place them.",
)
@pass_context
def cli(ctx: Context, **kwargs: dict) -> None:
    """
    Command-line interface entry point
    """
    ctx.ensure_object(dict)
    ctx.obj |= kwargs

    verbosity = kwargs.get("verbose", 0)

    basicConfig(
        format="%(asctime)s %(levelname)8s | %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
        level=INFO if verbosity == 0 else DEBUG,
    )

    if verbosity > 1:  # type: ignore[operator]
        getLogger("requests").setLevel(DEBUG)
        getLogger("urllib3").setLevel(DEBUG)
        getLogger("kraken").setLevel(DEBUG)
    else:
        getLogger("requests").setLevel(WARNING)
        getLogger("urllib3").setLevel(WARNING)
        getLogger("kraken").setLevel(WARNING)


@cli.command(
    context_settings={
        "auto_envvar_prefix": "SAFE_MARGINS_RUN",
        "help_option_names": ["-h", "--help"],
    },
    formatter_settings=HELP_THEME,
)
@option(
    "--name",
    required=False,
    type=STRING,
    default="safe-margins",
    help="The name of the bot.",
)
@option(
    "--exchange",
    type=Choice(choices=("Kraken",), case_sensitive=True),
    default="Kraken",
    help="The exchange to trade on.",
)
@option(
    "--base-currency",
    required=True,
    type=STRING,
    help="The base currency, i.e. the asset to trade (e.g. BTC).",
)
@option(
    "--quote-currency",
    required=True,
    type=STRING,
    help="The quote currency the base is priced in (e.g. USD).",
)
@option(
    "--volume-percentage",
    type=FLOAT,
    default=0.1,
    show_default=True,
    callback=ensure_percentage,
    help="The share of the available balances to trade per order.",
)
@option(
    "--price-variation",
    type=FLOAT,
    default=0.2,
    show_default=True,
    callback=ensure_ratio,
    help="The relative distance of the orders to the reference price.",
)
@option(
    "--interval",
    type=FLOAT,
    default=60,
    show_default=True,
    callback=ensure_larger_than_zero,
    help="The number of seconds between shifting the orders.",
)
@option(
    "--userref",
    required=False,
    type=INT,
    help="A reference number to tag the bot's orders with. If set, only"
    " orders with this reference are cancelled.",
)
@option(
    "--price-feed-url",
    type=STRING,
    default=DEFAULT_PRICE_FEED_URL,
    show_default=True,
    help="Template of the reference price URL with {base} and {quote} placeholders.",
)
@option(
    "--price-feed-key",
    type=STRING,
    default=DEFAULT_PRICE_FEED_KEY,
    show_default=True,
    help="Dot-separated path to the price within the price feed response.",
)
@option(
    "--telegram-token",
    required=False,
    type=STRING,
    help="The telegram token to use.",
)
@option(
    "--telegram-chat-id",
    required=False,
    type=STRING,
    help="The telegram chat ID to use.",
)
@pass_context
def run(ctx: Context, **kwargs: dict) -> None:
    """Run the safe margins limit order strategy"""
    # pylint: disable=import-outside-toplevel
    import asyncio  # noqa: PLC0415

    from safe_margins.core.engine import BotEngine  # noqa: PLC0415
    from safe_margins.models.configuration import (  # noqa: PLC0415
        BotConfigDTO,
        NotificationConfigDTO,
        TelegramConfigDTO,
    )

    ctx.obj |= kwargs

    async def main() -> int:
        engine = BotEngine(
            bot_config=BotConfigDTO(
                exchange=ctx.obj["exchange"],
                api_public_key=ctx.obj["api_public_key"],
                api_secret_key=ctx.obj["api_secret_key"],
                name=ctx.obj["name"],
                base_currency=ctx.obj["base_currency"],
                quote_currency=ctx.obj["quote_currency"],
                userref=ctx.obj["userref"],
                dry_run=ctx.obj["dry_run"],
                volume_percentage=ctx.obj["volume_percentage"],
                price_variation=ctx.obj["price_variation"],
                interval=ctx.obj["interval"],
                price_feed_url=ctx.obj["price_feed_url"],
                price_feed_key=ctx.obj["price_feed_key"],
            ),
            notification_config=NotificationConfigDTO(
                telegram=TelegramConfigDTO(
                    token=ctx.obj["telegram_token"],
                    chat_id=ctx.obj["telegram_chat_id"],
                ),
            ),
        )
        return await engine.run()

    sys.exit(asyncio.run(main()))


@cli.command(
    context_settings={
        "auto_envvar_prefix": "SAFE_MARGINS_CANCEL",
        "help_option_names": ["-h", "--help"],
    },
    formatter_settings=HELP_THEME,
)
@option(
    "-f",
    "--force",
    required=False,
    is_flag=True,
    default=False,
    show_default=True,
)
@option(
    "--base-currency",
    required=True,
    type=STRING,
    help="The base currency of the market.",
)
@option(
    "--quote-currency",
    required=True,
    type=STRING,
    help="The quote currency of the market.",
)
@option(
    "--userref",
    required=False,
    type=INT,
    help="Only cancel orders tagged with this reference number.",
)
@pass_context
def cancel(ctx: Context, **kwargs: dict) -> None:
    """Cancel all open orders of a market."""
    ctx.obj |= kwargs
    if not ctx.obj["force"]:
        echo("Not canceling -f is required!", err=True)
        sys.exit(1)

    # pylint: disable=import-outside-toplevel
    import asyncio  # noqa: PLC0415

    from safe_margins.adapters.exchanges.kraken import (  # noqa: PLC0415
        KrakenExchangeRESTServiceAdapter,
    )
    from safe_margins.adapters.price_feed import HTTPPriceFeedAdapter  # noqa: PLC0415
    from safe_margins.core.event_bus import EventBus  # noqa: PLC0415
    from safe_margins.models.configuration import BotConfigDTO  # noqa: PLC0415
    from safe_margins.strategies.safe_margins import (  # noqa: PLC0415
        SafeMarginsStrategy,
    )

    config = BotConfigDTO(
        api_public_key=ctx.obj["api_public_key"],
        api_secret_key=ctx.obj["api_secret_key"],
        base_currency=ctx.obj["base_currency"],
        quote_currency=ctx.obj["quote_currency"],
        userref=ctx.obj["userref"],
    )
    strategy = SafeMarginsStrategy(
        config=config,
        rest_api=KrakenExchangeRESTServiceAdapter(
            api_public_key=config.api_public_key,
            api_secret_key=config.api_secret_key,
        ),
        price_feed=HTTPPriceFeedAdapter(
            url_template=config.price_feed_url,
            key=config.price_feed_key,
        ),
        event_bus=EventBus(),
    )
    report = asyncio.run(strategy.cancel_open_orders())
    echo(report.model_dump_json(indent=2))
    sys.exit(1 if report.failed else 0)
