"""
Projection of analytics records into HTTP Event Collector events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from hecpump.analytics import AnalyticsRecord
from hecpump.config.log_codes import PROJECTION_UNKNOWN_FIELD
from hecpump.constants import API_KEY_MASK

if TYPE_CHECKING:
    from hecpump.config import SplunkPumpConfig

logger = logging.getLogger(__name__)


class EventField(Enum):
    """
    Fields an event can carry, valued by their name on the wire.
    """

    METHOD = "method"
    PATH = "path"
    RESPONSE_CODE = "response_code"
    API_KEY = "api_key"
    TIME_STAMP = "time_stamp"
    API_VERSION = "api_version"
    API_NAME = "api_name"
    API_ID = "api_id"
    ORG_ID = "org_id"
    OAUTH_ID = "oauth_id"
    RAW_REQUEST = "raw_request"
    REQUEST_TIME = "request_time"
    RAW_RESPONSE = "raw_response"
    IP_ADDRESS = "ip_address"

    @classmethod
    def lookup(cls, name: str) -> Optional[EventField]:
        """
        Resolve a configured field name, or None if no such field exists.
        """
        try:
            return cls(name)
        except ValueError:
            return None

    def extract(self, record: AnalyticsRecord) -> Any:
        return _ACCESSORS[self](record)


_ACCESSORS: dict[EventField, Callable[[AnalyticsRecord], Any]] = {
    EventField.METHOD: attrgetter("method"),
    EventField.PATH: attrgetter("path"),
    EventField.RESPONSE_CODE: attrgetter("response_code"),
    EventField.API_KEY: attrgetter("api_key"),
    EventField.TIME_STAMP: attrgetter("timestamp"),
    EventField.API_VERSION: attrgetter("api_version"),
    EventField.API_NAME: attrgetter("api_name"),
    EventField.API_ID: attrgetter("api_id"),
    EventField.ORG_ID: attrgetter("org_id"),
    EventField.OAUTH_ID: attrgetter("oauth_id"),
    EventField.RAW_REQUEST: attrgetter("raw_request"),
    EventField.REQUEST_TIME: attrgetter("request_time"),
    EventField.RAW_RESPONSE: attrgetter("raw_response"),
    EventField.IP_ADDRESS: attrgetter("ip_address"),
}

# Emitted, without redaction, when no fields are configured
DEFAULT_FIELDS: tuple[EventField, ...] = tuple(EventField)


@dataclass(frozen=True)
class ProjectionConfig:
    """
    Which fields an event carries and how the API key is redacted.
    """

    fields: tuple[str, ...] = ()
    obfuscate_api_keys: bool = False
    obfuscate_api_keys_length: int = 0

    def __post_init__(self):
        if self.obfuscate_api_keys_length < 0:
            raise ValueError("obfuscate_api_keys_length must not be negative")

    @classmethod
    def from_pump_config(cls, config: SplunkPumpConfig) -> ProjectionConfig:
        return cls(
            fields=tuple(config.fields),
            obfuscate_api_keys=config.obfuscate_api_keys,
            obfuscate_api_keys_length=config.obfuscate_api_keys_length,
        )

    def unknown_fields(self) -> list[str]:
        """
        Configured names that match no field; they are dropped from every event.
        """
        return [name for name in self.fields if EventField.lookup(name) is None]


def obfuscate_api_key(api_key: str, visible: int) -> Optional[str]:
    """
    Mask an API key, keeping its last `visible` characters.

    Returns:
        Optional[str]: The masked key, or None when the key is not longer than
        `visible` and would be exposed in full.
    """
    if len(api_key) <= visible:
        return None
    return API_KEY_MASK + api_key[len(api_key) - visible:]


def _project(
    record: AnalyticsRecord, names: Iterable[str], projection: ProjectionConfig
) -> dict[str, Any]:
    event: dict[str, Any] = {}

    for name in names:
        event_field = EventField.lookup(name)
        if event_field is None:
            logger.debug(PROJECTION_UNKNOWN_FIELD, extra={"field": name})
            continue

        if event_field is EventField.API_KEY and projection.obfuscate_api_keys:
            masked = obfuscate_api_key(record.api_key, projection.obfuscate_api_keys_length)
            if masked is not None:
                event[event_field.value] = masked
            continue

        event[event_field.value] = event_field.extract(record)

    return event


def build_event(record: AnalyticsRecord, projection: ProjectionConfig) -> dict[str, Any]:
    """
    Build the event payload for one record.

    With configured fields, each known field is emitted in configuration order
    and unknown names are skipped; the API key is redacted when enabled. With
    no configured fields, all DEFAULT_FIELDS are emitted verbatim.

    Args:
        record: The analytics record.
        projection: Field selection and redaction settings.

    Returns:
        dict[str, Any]: A new event dictionary owned by the caller.
    """
    if projection.fields:
        return _project(record, projection.fields, projection)

    return {event_field.value: event_field.extract(record) for event_field in DEFAULT_FIELDS}
