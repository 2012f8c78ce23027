"""Click CLI for running and inspecting the Messenger shopping bot."""

from __future__ import annotations

import json
import logging
import os

import click
import uvicorn
from pydantic import ValidationError

from src.bot import links
from src.config import BotConfig
from src.models import Product


@click.group()
@click.option(
    "--log-level",
    default=lambda: os.environ.get("LOG_LEVEL", "INFO"),
    help="Logging level (defaults to LOG_LEVEL or INFO).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    """Messenger shopping assistant bot."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    ctx.ensure_object(dict)
    ctx.obj["config"] = BotConfig.from_env()


@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to PORT).")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int | None) -> None:
    """Run the webhook server."""
    config: BotConfig = ctx.obj["config"]
    port = port or config.port
    click.echo(f"Webhook is listening at http://127.0.0.1:{port}/webhook", err=True)
    uvicorn.run("src.server.app:create_app_from_env", factory=True, host=host, port=port)


@cli.command("check-config")
@click.pass_context
def check_config(ctx: click.Context) -> None:
    """Report mandatory environment variables that are not set."""
    config: BotConfig = ctx.obj["config"]
    missing = config.missing()
    if not missing:
        click.echo("Configuration complete.")
        return
    for name in missing:
        click.echo(f"Missing: {name}")
    ctx.exit(1)


@cli.command("encode-link")
@click.argument("product_json")
@click.pass_context
def encode_link(ctx: click.Context, product_json: str) -> None:
    """Print the product view URL for a product record."""
    config: BotConfig = ctx.obj["config"]
    try:
        product = Product.model_validate(json.loads(product_json))
    except (json.JSONDecodeError, ValidationError) as e:
        raise click.BadParameter(str(e), param_hint="PRODUCT_JSON") from e
    click.echo(links.product_url(config.view_product_url, product))


@cli.command("decode-link")
@click.argument("data")
def decode_link(data: str) -> None:
    """Print the product view data carried in a link's data parameter."""
    try:
        view = links.decode_data(data)
    except links.InvalidLinkDataError as e:
        raise click.BadParameter(str(e), param_hint="DATA") from e
    click.echo(json.dumps(links.products_page_data(view), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
