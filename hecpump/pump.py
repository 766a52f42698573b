"""
Splunk pump: delivers batches of analytics records to an HTTP Event Collector.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

import httpx

from hecpump.analytics import AnalyticsRecord
from hecpump.client import SplunkClient
from hecpump.config import DeliveryPolicy, SplunkPumpConfig, decode_config
from hecpump.config.log_codes import DELIVERY_BATCH_DONE, DELIVERY_FAILED
from hecpump.constants import PUMP_NAME, PUMP_PREFIX
from hecpump.errors import BatchDeliveryError, DeliveryError, DeliveryTimeoutError
from hecpump.fields import ProjectionConfig, build_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    """
    Outcome of delivering one record of a batch.
    """

    index: int
    status_code: Optional[int] = None
    error: Optional[DeliveryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DeliveryReport:
    """
    Outcomes of a batch, in input order.
    """

    results: list[DeliveryResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> list[DeliveryResult]:
        return [result for result in self.results if not result.ok]

    @property
    def sent(self) -> int:
        return self.total - len(self.failures)


def _as_record(item: Union[AnalyticsRecord, Mapping[str, Any]]) -> AnalyticsRecord:
    if isinstance(item, AnalyticsRecord):
        return item
    if isinstance(item, Mapping):
        return AnalyticsRecord.from_dict(item)
    raise TypeError(f"Expected an AnalyticsRecord, got {type(item).__name__}")


class SplunkPump:
    """
    Pump driver for Splunk.

    Call init() once with the settings, then write_data() for each batch.

    Args:
        transport (Optional[httpx.AsyncBaseTransport]): Transport handed to the
            client instead of one built from the TLS settings.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self.config: Optional[SplunkPumpConfig] = None
        self.client: Optional[SplunkClient] = None
        self.projection = ProjectionConfig()

    def new(self) -> SplunkPump:
        return SplunkPump()

    def get_name(self) -> str:
        return PUMP_NAME

    def init(self, config: Union[SplunkPumpConfig, Mapping[str, Any]]) -> None:
        """
        Decode the settings and build the client.

        Raises:
            ConfigurationError: If the settings are invalid or the TLS setup fails.
            RuntimeError: If the pump is already initialized and was not closed.
        """
        if self.client is not None:
            raise RuntimeError(f"{PUMP_NAME} is already initialized, close() it first")

        self.config = decode_config(config)
        logger.info(
            "%s Endpoint: %s", PUMP_NAME, self.config.collector_url,
            extra={"prefix": PUMP_PREFIX},
        )

        self.client = SplunkClient(
            self.config.collector_token,
            self.config.collector_url,
            skip_verify=self.config.ssl_insecure_skip_verify,
            cert_file=self.config.ssl_cert_file,
            key_file=self.config.ssl_key_file,
            server_name=self.config.ssl_server_name,
            timeout=self.config.timeout,
            strict_status=self.config.strict_status,
            transport=self._transport,
        )
        self.projection = ProjectionConfig.from_pump_config(self.config)

        for name in self.projection.unknown_fields():
            logger.warning(
                "Configured field %r is unknown and will not be sent", name,
                extra={"prefix": PUMP_PREFIX},
            )

        logger.debug("%s Initialized", PUMP_NAME, extra={"prefix": PUMP_PREFIX})

    @property
    def endpoint(self) -> str:
        """
        The resolved collector URL events are posted to.
        """
        if self.client is None:
            raise RuntimeError(f"{PUMP_NAME} is not initialized")
        return self.client.collector_url

    async def _deliver_one(
        self, client: SplunkClient, index: int, record: AnalyticsRecord
    ) -> DeliveryResult:
        event = build_event(record, self.projection)
        try:
            response = await client.send(event, record.timestamp)
        except DeliveryError as e:
            logger.warning(
                DELIVERY_FAILED,
                extra={"prefix": PUMP_PREFIX, "index": index, "reason": str(e)},
            )
            return DeliveryResult(index=index, error=e)

        return DeliveryResult(index=index, status_code=response.status_code)

    async def _deliver_all(
        self, client: SplunkClient, records: list[AnalyticsRecord], max_concurrency: int
    ) -> list[DeliveryResult]:
        if max_concurrency == 1:
            return [
                await self._deliver_one(client, i, record) for i, record in enumerate(records)
            ]

        semaphore = asyncio.Semaphore(max_concurrency)

        async def bounded(index: int, record: AnalyticsRecord) -> DeliveryResult:
            async with semaphore:
                return await self._deliver_one(client, index, record)

        return list(
            await asyncio.gather(*(bounded(i, record) for i, record in enumerate(records)))
        )

    async def write_data(
        self,
        records: Iterable[Union[AnalyticsRecord, Mapping[str, Any]]],
        timeout: Optional[float] = None,
    ) -> DeliveryReport:
        """
        Send one event per record to the collector.

        Under the fire-and-forget policy, failed sends are logged and reported
        but never raised. Under the aggregate policy, every record is attempted
        and BatchDeliveryError is raised if any failed. Cancellation of the
        calling task always propagates.

        Args:
            records: The batch, as records or their JSON mappings.
            timeout: Deadline in seconds for the whole batch.

        Returns:
            DeliveryReport: One result per record, in input order.

        Raises:
            BatchDeliveryError: Under the aggregate policy, if any send failed.
            DeliveryTimeoutError: If the batch deadline expires.
            RuntimeError: If init() was not called.
        """
        if self.client is None or self.config is None:
            raise RuntimeError(f"{PUMP_NAME} is not initialized")

        batch = [_as_record(item) for item in records]
        logger.info("Writing %d records", len(batch), extra={"prefix": PUMP_PREFIX})

        deliveries = self._deliver_all(self.client, batch, self.config.max_concurrency)
        if timeout is None:
            results = await deliveries
        else:
            try:
                results = await asyncio.wait_for(deliveries, timeout)
            except asyncio.TimeoutError as e:
                raise DeliveryTimeoutError(timeout=timeout) from e

        report = DeliveryReport(results=results)
        logger.info(
            DELIVERY_BATCH_DONE,
            extra={"prefix": PUMP_PREFIX, "sent": report.sent, "failed": len(report.failures)},
        )

        if report.failures and self.config.delivery_policy is DeliveryPolicy.AGGREGATE:
            raise BatchDeliveryError(report.failures, report.total)

        return report

    async def close(self) -> None:
        client, self.client = self.client, None
        if client is not None:
            await client.aclose()
