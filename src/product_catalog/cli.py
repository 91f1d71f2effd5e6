"""CLI entry point for the product catalog."""

from __future__ import annotations

import click


@click.group()
def main() -> None:
    """Product catalog service."""


@main.command("init-db")
@click.option("--config", default=None, help="Config file path")
def init_db(config: str | None) -> None:
    """Create the products table in the configured database."""
    import asyncio

    from .core.config import load_settings
    from .storage.postgres import create_all, create_engine

    settings = load_settings(config_path=config)
    if not settings.database.url:
        raise click.UsageError(
            "No database configured (set CATALOG_DATABASE__URL or database.url)"
        )

    async def _run() -> None:
        engine = create_engine(settings.database.url, use_null_pool=True)
        try:
            await create_all(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())
    click.echo("Tables created.")


@main.command("show-config")
@click.option("--config", default=None, help="Config file path")
def show_config(config: str | None) -> None:
    """Print the resolved settings as JSON."""
    from .core.config import load_settings

    settings = load_settings(config_path=config)
    settings.validate_consistency()
    click.echo(settings.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
