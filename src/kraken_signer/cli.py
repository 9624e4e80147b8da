from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from kraken_signer.builder import build
from kraken_signer.config.orders import OrderConfig, load_order_batch_config
from kraken_signer.errors import KrakenSignerError
from kraken_signer.exchange import KrakenPrivateClient
from kraken_signer.logging_utils import configure_logging
from kraken_signer.settings import Settings

app = typer.Typer(no_args_is_help=True, add_completion=False)
logger = logging.getLogger("kraken_signer")


def _parse_params(values: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {item!r}")
        if key in params:
            raise typer.BadParameter(f"duplicate parameter {key!r}")
        params[key] = value
    return params


def _client(settings: Settings) -> KrakenPrivateClient:
    return KrakenPrivateClient(
        credential=settings.credential(),
        base_url=settings.kraken_base_url,
        timeout_seconds=settings.kraken_timeout_seconds,
        max_retries=settings.kraken_max_retries,
    )


def _fail(exc: Exception) -> typer.Exit:
    logger.error("command_failed", exc_info=exc)
    typer.echo({"ok": False, "error": str(exc)}, err=True)
    return typer.Exit(code=1)


@app.command()
def show_config() -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    typer.echo(settings.redacted())


@app.command()
def sign(
    method: str = typer.Argument(..., help="Private method name, e.g. Balance."),
    param: list[str] = typer.Option([], "--param", "-p", help="Request parameter key=value."),
) -> None:
    """
    Build a signed request offline and print it without sending.
    """
    settings = Settings()
    configure_logging(settings.log_level)
    try:
        request = build(
            settings.credential(),
            method,
            _parse_params(param),
            host=settings.kraken_base_url,
        )
    except (KrakenSignerError, ValueError) as exc:
        raise _fail(exc) from exc
    typer.echo(
        {
            "method": request.method,
            "url": request.url,
            "nonce": request.nonce,
            "body": request.body,
            "signature": request.signature,
        }
    )


@app.command()
def balance() -> None:
    settings = Settings()
    configure_logging(settings.log_level)

    async def _run() -> dict[str, str]:
        client = _client(settings)
        try:
            return await client.balance()
        finally:
            await client.aclose()

    try:
        result = asyncio.run(_run())
    except KrakenSignerError as exc:
        raise _fail(exc) from exc
    typer.echo({"ok": True, "balance": result})


@app.command()
def add_order(
    pair: str = typer.Option(..., help="Asset pair, e.g. SOLUSD."),
    direction: str = typer.Option("buy", help="buy or sell."),
    order_type: str = typer.Option("limit", help="Kraken order type."),
    volume: str = typer.Option(..., help="Order volume in lots."),
    price: Optional[str] = typer.Option(None, help="Price (dependent upon order type)."),
    price2: Optional[str] = typer.Option(None, help="Secondary price."),
    validate: bool = typer.Option(True, "--validate/--submit", help="Validate only."),
) -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    try:
        entry = OrderConfig.model_validate(
            {
                "pair": pair,
                "direction": direction,
                "order_type": order_type,
                "price": price,
                "price2": price2,
                "volume": volume,
                "validate": validate,
            }
        )
        entry.validate_logic()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    order = entry.to_order()

    async def _run() -> None:
        client = _client(settings)
        try:
            result = await client.add_order(order)
            typer.echo({"ok": True, "descr": result.descr, "txid": result.txid})
        finally:
            await client.aclose()

    try:
        asyncio.run(_run())
    except KrakenSignerError as exc:
        raise _fail(exc) from exc


@app.command()
def place_orders(
    config: Path = typer.Option(
        Path("configs/orders.toml"),
        help="Order batch file (TOML).",
    ),
) -> None:
    """
    Submit every order from a batch file, then print the account balance.
    """
    settings = Settings()
    configure_logging(settings.log_level)
    if not config.exists():
        raise typer.BadParameter(f"config file not found: {config}")

    try:
        batch = load_order_batch_config(config)
    except Exception as e:
        raise typer.BadParameter(f"invalid config: {e}") from e

    async def _run() -> dict[str, str]:
        client = _client(settings)
        try:
            for entry in batch.orders:
                result = await client.add_order(entry.to_order())
                typer.echo({"pair": entry.pair, "descr": result.descr, "txid": result.txid})
            return await client.balance()
        finally:
            await client.aclose()

    try:
        result = asyncio.run(_run())
    except KrakenSignerError as exc:
        raise _fail(exc) from exc
    typer.echo({"ok": True, "balance": result})

