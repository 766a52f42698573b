import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional, TextIO

import typer
from rich.markup import escape

from hecpump.analytics import AnalyticsRecord
from hecpump.config import SplunkPumpConfig, get_pump_config
from hecpump.console import main_console as console
from hecpump.error_handlers import handle_cmd_exception
from hecpump.errors import InvalidRecordError
from hecpump.pump import DeliveryReport, SplunkPump

LOG = logging.getLogger(__name__)

CLI_MAIN_INTRODUCTION = (
    "Deliver API analytics records to a Splunk HTTP Event Collector."
)

cli = typer.Typer(rich_markup_mode="rich", help=CLI_MAIN_INTRODUCTION, no_args_is_help=True)


def configure_logger(debug: bool) -> None:
    level = logging.CRITICAL

    if debug:
        level = logging.DEBUG

    logging.basicConfig(format="%(asctime)s %(name)s => %(message)s", level=level)


@cli.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    configure_logger(debug)


def _load_config(
    config: Optional[Path],
    collector_url: Optional[str],
    collector_token: Optional[str],
) -> SplunkPumpConfig:
    overrides = {"collector_url": collector_url, "collector_token": collector_token}
    return get_pump_config(overrides=overrides, config_path=config)


def read_records(stream: TextIO) -> List[AnalyticsRecord]:
    """
    Read analytics records from JSON lines. Blank lines are skipped.

    Raises:
        InvalidRecordError: If a line is not a JSON object or a field has the wrong type.
    """
    records = []

    for line_number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            data = json.loads(line)
            if not isinstance(data, dict):
                raise ValueError("a JSON object is expected")
            records.append(AnalyticsRecord.from_dict(data))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            raise InvalidRecordError(line_number, reason=str(e)) from e

    return records


async def _deliver(
    pump: SplunkPump, records: List[AnalyticsRecord], timeout: Optional[float]
) -> DeliveryReport:
    try:
        return await pump.write_data(records, timeout=timeout)
    finally:
        await pump.close()


CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="INI file with a [splunk] section.",
    exists=True, dir_okay=False,
)
URL_OPTION = typer.Option(None, "--collector-url", help="Overrides collector_url.")
TOKEN_OPTION = typer.Option(None, "--collector-token", help="Overrides collector_token.")


@cli.command(help="Validate the settings and show the resolved endpoint.")
@handle_cmd_exception
def check(
    config: Optional[Path] = CONFIG_OPTION,
    collector_url: Optional[str] = URL_OPTION,
    collector_token: Optional[str] = TOKEN_OPTION,
) -> None:
    settings = _load_config(config, collector_url, collector_token)
    pump = SplunkPump()
    pump.init(settings)

    console.print(f"[ok]OK[/ok] {pump.get_name()} endpoint: {escape(pump.endpoint)}")
    console.print(
        f"[muted]TLS verification: "
        f"{'disabled' if settings.ssl_insecure_skip_verify else 'enabled'}[/muted]"
    )
    fields = ", ".join(settings.fields) if settings.fields else "default set"
    console.print(f"[muted]Fields: {escape(fields)}[/muted]")
    for name in pump.projection.unknown_fields():
        console.print(f"[warn]Unknown field {escape(repr(name))} will be skipped[/warn]")

    asyncio.run(pump.close())


@cli.command(help="Send analytics records, one JSON object per line, as one batch.")
@handle_cmd_exception
def send(
    records: typer.FileText = typer.Argument(..., help="JSON lines file, or - for stdin."),
    config: Optional[Path] = CONFIG_OPTION,
    collector_url: Optional[str] = URL_OPTION,
    collector_token: Optional[str] = TOKEN_OPTION,
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0, help="Deadline in seconds for the whole batch."
    ),
) -> None:
    batch = read_records(records)
    settings = _load_config(config, collector_url, collector_token)
    pump = SplunkPump()
    pump.init(settings)

    report = asyncio.run(_deliver(pump, batch, timeout))

    for result in report.failures:
        console.print(f"[warn]Record {result.index + 1}: {escape(str(result.error))}[/warn]")
    console.print(f"Sent {report.sent} of {report.total} events.")
