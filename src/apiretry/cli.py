"""CLI interface for apiretry"""

import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml

from apiretry.domain.config.retry import RetryConfig
from apiretry.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from apiretry.infrastructure.http_client import request_json_with_retries

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _load_config_manager(ctx: click.Context) -> ConfigManager:
    try:
        return ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)


def _override_retry_config(base: RetryConfig, **overrides) -> RetryConfig:
    """Apply CLI overrides (None = keep config value) and re-validate"""
    values = base.model_dump()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return RetryConfig(**values)


def _parse_json_payload(data: Optional[str]) -> Optional[dict]:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint="--data")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .apiretry.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """apiretry - call HTTP APIs with retry and exponential backoff"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command("show-config")
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as YAML."""
    config_manager = _load_config_manager(ctx)
    click.echo(yaml.safe_dump(config_manager.config.model_dump(), sort_keys=False), nl=False)


@cli.command()
@click.argument("url", type=str)
@click.option("--method", "-X", default="GET", show_default=True, help="HTTP method")
@click.option("--data", "-d", type=str, help="JSON request body")
@click.option("--max-retries", type=click.IntRange(min=0), help="Retries after the first attempt. Overrides config.")
@click.option("--initial-delay", type=click.FloatRange(min=0), help="First backoff delay in ms. Overrides config.")
@click.option("--max-delay", type=click.FloatRange(min=0), help="Upper bound on any wait in ms. Overrides config.")
@click.option(
    "--backoff-multiplier",
    type=click.FloatRange(min=0, min_open=True),
    help="Delay growth factor per retry. Overrides config.",
)
@click.pass_context
def fetch(
    ctx,
    url: str,
    method: str,
    data: Optional[str],
    max_retries: Optional[int],
    initial_delay: Optional[float],
    max_delay: Optional[float],
    backoff_multiplier: Optional[float],
):
    """Send a request to URL, retrying transient failures, and print the body."""
    verbose = ctx.obj.get("verbose", False)
    payload = _parse_json_payload(data)
    config_manager = _load_config_manager(ctx)
    http_config = config_manager.get_http_config()
    retry_config = _override_retry_config(
        config_manager.get_retry_config(),
        max_retries=max_retries,
        initial_delay=initial_delay,
        max_delay=max_delay,
        backoff_multiplier=backoff_multiplier,
    )

    logger.info(f"{method.upper()} {url} (max retries: {retry_config.max_retries})")
    try:
        response = request_json_with_retries(
            method,
            url,
            payload=payload,
            headers=dict(http_config.headers),
            timeout=http_config.timeout,
            retry=retry_config,
        )
    except Exception as e:
        _die(f"Request failed: {e}", verbose=verbose, exc=e)

    click.echo(response.text)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
