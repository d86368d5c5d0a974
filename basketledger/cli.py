"""CLI entrypoint for basketledger."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import CONFIG_FILENAME, LOG_LEVELS, STORE_DIRNAME, StoreConfig, load_config
from .errors import ConfigError


def _auto_detect_store(start: Path) -> Path | None:
    """Find a .basketledger store folder by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / STORE_DIRNAME
        if candidate.is_dir():
            return candidate
    return None


def _configure_logging(level: str) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="basketledger")
@click.option(
    "--store",
    "-s",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help=f"Store directory (defaults to auto-detected ./{STORE_DIRNAME})",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=f"TOML config file (defaults to ./{CONFIG_FILENAME} if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level for store operations",
)
@click.pass_context
def cli(ctx: click.Context, store: Path | None, config_path: Path | None, log_level: str | None) -> None:
    """basketledger - content-addressed baskets, products and positions.

    Entries are immutable and addressed by content; basket totals are
    recomputed from linked positions on every add.
    """
    ctx.ensure_object(dict)
    if config_path is None:
        default_config = Path.cwd() / CONFIG_FILENAME
        config_path = default_config if default_config.exists() else None

    try:
        config = load_config(config_path, overrides={"store_dir": store, "log_level": log_level})
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if config.store_dir is None:
        detected = _auto_detect_store(Path.cwd())
        config = StoreConfig(
            store_dir=detected or (Path.cwd() / STORE_DIRNAME),
            max_update_attempts=config.max_update_attempts,
            log_level=config.log_level,
        )

    _configure_logging(config.log_level)
    ctx.obj["config"] = config


# -----------------------------------------------------------------------------
# Products
# -----------------------------------------------------------------------------


@cli.group()
def product() -> None:
    """Product commands."""
    pass


@product.command("create")
@click.argument("name")
@click.option("--price", type=float, required=True, help="Unit price")
@click.option("--description", default="", help="Free-text description")
@click.pass_context
def product_create(ctx: click.Context, name: str, price: float, description: str) -> None:
    """Store a product and print its address.

    Creating the same product twice returns the same address.

    Examples:

        basketledger product create coffee --price 2.5 --description "filter, 0.3l"
    """
    from .commands.pos_cmd import run_product_create

    sys.exit(run_product_create(ctx.obj["config"], name, price, description))


@product.command("list")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def product_list(ctx: click.Context, output_json: bool) -> None:
    """List all distinct products."""
    from .commands.pos_cmd import run_product_list

    sys.exit(run_product_list(ctx.obj["config"], output_json=output_json))


# -----------------------------------------------------------------------------
# Baskets
# -----------------------------------------------------------------------------


@cli.group()
def basket() -> None:
    """Basket commands."""
    pass


@basket.command("create")
@click.argument("name")
@click.pass_context
def basket_create(ctx: click.Context, name: str) -> None:
    """Create an empty basket and print its address."""
    from .commands.pos_cmd import run_basket_create

    sys.exit(run_basket_create(ctx.obj["config"], name))


@basket.command("add")
@click.argument("basket_addr", metavar="BASKET")
@click.argument("product_addr", metavar="PRODUCT")
@click.option("--amount", type=int, required=True, help="Number of units")
@click.option("--timestamp", default=None, help="Position timestamp (default: now, UTC)")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def basket_add(
    ctx: click.Context,
    basket_addr: str,
    product_addr: str,
    amount: int,
    timestamp: str | None,
    output_json: bool,
) -> None:
    """Add a position for PRODUCT to BASKET and print the updated basket.

    BASKET may be the address returned by `basket create` or any later
    version of it.

    Examples:

        basketledger basket add <basket> <product> --amount 2
    """
    from .commands.pos_cmd import run_basket_add

    sys.exit(
        run_basket_add(
            ctx.obj["config"],
            basket_addr,
            product_addr,
            amount,
            timestamp=timestamp,
            output_json=output_json,
        )
    )


@basket.command("show")
@click.argument("basket_addr", metavar="BASKET")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def basket_show(ctx: click.Context, basket_addr: str, output_json: bool) -> None:
    """Show the current version of a basket with its positions."""
    from .commands.pos_cmd import run_basket_show

    sys.exit(run_basket_show(ctx.obj["config"], basket_addr, output_json=output_json))


@basket.command("list")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def basket_list(ctx: click.Context, output_json: bool) -> None:
    """List baskets, one row per basket at its current version."""
    from .commands.pos_cmd import run_basket_list

    sys.exit(run_basket_list(ctx.obj["config"], output_json=output_json))


# -----------------------------------------------------------------------------
# Store maintenance
# -----------------------------------------------------------------------------


@cli.group()
def store() -> None:
    """Store maintenance commands."""
    pass


@store.command("verify")
@click.pass_context
def store_verify(ctx: click.Context) -> None:
    """Recompute the address of every stored entry and report per-type counts."""
    from .commands.pos_cmd import run_store_verify

    sys.exit(run_store_verify(ctx.obj["config"]))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
