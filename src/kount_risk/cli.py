"""CLI entry point for evaluating orders with Kount."""

import asyncio
import json
import logging
import sys

import click

from .config import settings
from .core.base_models import EvaluationMode, EvaluationOptions
from .core.exceptions import KountError
from .service import FraudDetectionService
from .transformers.request_builder import RequestBuilder
from .validators.required import validate_order

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _load_order(order_file) -> dict:
    try:
        order = json.load(order_file)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="ORDER_FILE")
    if not isinstance(order, dict):
        raise click.BadParameter("must contain a JSON object", param_hint="ORDER_FILE")
    return order


def _fail(error: KountError) -> None:
    body = {"error": type(error).__name__, "message": error.message, "http_status": error.http_status}
    for attr in ("field", "status_code", "json_response"):
        if getattr(error, attr, None) is not None:
            body[attr] = getattr(error, attr)
    click.echo(json.dumps(body, indent=2, default=str), err=True)
    sys.exit(1)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug: bool):
    """Kount order risk adapter."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument("order_file", type=click.File("r"))
@click.option("--pre-auth", is_flag=True, help="Build the pre-authorization variant")
def build(order_file, pre_auth: bool):
    """Print the Kount request built from ORDER_FILE without sending it."""
    mode = EvaluationMode.PRE_AUTH if pre_auth else EvaluationMode.POST_AUTH
    try:
        order = validate_order(_load_order(order_file))
    except KountError as e:
        _fail(e)
    payload = RequestBuilder().build(order, mode=mode)
    click.echo(json.dumps(payload, indent=2))


@cli.command()
@click.argument("order_file", type=click.File("r"))
@click.option("--pre-auth", is_flag=True, help="Evaluate before payment authorization")
@click.option("--no-risk-inquiry", is_flag=True, help="Send riskInquiry off (order is only recorded)")
@click.option("--exclude-device", is_flag=True, help="Skip device data collection lookup")
@click.option("--include-raw", is_flag=True, help="Include the raw Kount body in the output")
def evaluate(order_file, pre_auth: bool, no_risk_inquiry: bool, exclude_device: bool, include_raw: bool):
    """Evaluate the order in ORDER_FILE and print the normalized result."""
    order = _load_order(order_file)
    options = EvaluationOptions(
        mode=EvaluationMode.PRE_AUTH if pre_auth else EvaluationMode.POST_AUTH,
        risk_inquiry=not no_risk_inquiry,
        exclude_device=exclude_device,
    )

    async def run():
        async with FraudDetectionService.from_settings() as service:
            return await service.evaluate_order(order, options)

    try:
        result = asyncio.run(run())
    except KountError as e:
        _fail(e)

    exclude = None if include_raw else {"raw"}
    click.echo(json.dumps(result.model_dump(mode="json", exclude=exclude), indent=2))


@cli.command()
def token():
    """Fetch a bearer token and report its expiry."""

    async def run():
        async with FraudDetectionService.from_settings() as service:
            await service.authenticator.bearer_token()
            return service.authenticator.token_cache.read(service.authenticator.cache_key)

    try:
        cached = asyncio.run(run())
    except KountError as e:
        _fail(e)

    click.echo(f"Environment: {settings.environment.value}")
    if cached is not None:
        click.echo(f"Token valid until: {cached.expires_at.isoformat()}")


if __name__ == "__main__":
    cli()
