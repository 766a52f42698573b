from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a record timestamp.

    Accepts datetimes, Unix seconds and ISO-8601 strings (a trailing "Z" is
    read as UTC). Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not a recognised timestamp.
    """
    if value is None or value == "":
        return EPOCH

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Timestamp out of range: {value!r}") from e
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        parsed = datetime.fromisoformat(raw)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_int(value: Any) -> int:
    # json.loads accepts Infinity and NaN
    try:
        return int(value or 0)
    except OverflowError as e:
        raise ValueError(f"Number out of range: {value!r}") from e


@dataclass(frozen=True)
class AnalyticsRecord:
    """
    One API gateway analytics record, as handed to the pump.
    """

    method: str = ""
    path: str = ""
    response_code: int = 0
    api_key: str = ""
    timestamp: datetime = EPOCH
    api_version: str = ""
    api_name: str = ""
    api_id: str = ""
    org_id: str = ""
    oauth_id: str = ""
    raw_request: str = ""
    raw_response: str = ""
    request_time: int = 0
    ip_address: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AnalyticsRecord:
        """
        Build a record from its JSON representation.

        Missing keys take zero values. Unknown keys are ignored.

        Raises:
            ValueError: If a value cannot be converted to the field's type.
        """
        return cls(
            method=str(data.get("method") or ""),
            path=str(data.get("path") or ""),
            response_code=_to_int(data.get("response_code")),
            api_key=str(data.get("api_key") or ""),
            timestamp=parse_timestamp(data.get("timestamp")),
            api_version=str(data.get("api_version") or ""),
            api_name=str(data.get("api_name") or ""),
            api_id=str(data.get("api_id") or ""),
            org_id=str(data.get("org_id") or ""),
            oauth_id=str(data.get("oauth_id") or ""),
            raw_request=str(data.get("raw_request") or ""),
            raw_response=str(data.get("raw_response") or ""),
            request_time=_to_int(data.get("request_time")),
            ip_address=str(data.get("ip_address") or ""),
        )
