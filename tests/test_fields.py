import pytest

from hecpump.analytics import AnalyticsRecord
from hecpump.fields import (
    DEFAULT_FIELDS,
    EventField,
    ProjectionConfig,
    build_event,
    obfuscate_api_key,
)

DEFAULT_KEYS = {
    "method",
    "path",
    "response_code",
    "api_key",
    "time_stamp",
    "api_version",
    "api_name",
    "api_id",
    "org_id",
    "oauth_id",
    "raw_request",
    "request_time",
    "raw_response",
    "ip_address",
}


@pytest.mark.unit
class TestEventField:
    def test_lookup_known(self) -> None:
        assert EventField.lookup("api_key") is EventField.API_KEY

    def test_lookup_unknown(self) -> None:
        assert EventField.lookup("user_agent") is None

    def test_every_field_has_an_accessor(self, record: AnalyticsRecord) -> None:
        for event_field in EventField:
            event_field.extract(record)

    def test_default_fields_cover_fourteen_keys(self) -> None:
        assert len(DEFAULT_FIELDS) == 14
        assert {f.value for f in DEFAULT_FIELDS} == DEFAULT_KEYS


@pytest.mark.unit
class TestObfuscateApiKey:
    def test_keeps_suffix(self) -> None:
        assert obfuscate_api_key("1234567890", 4) == "****7890"

    def test_zero_length_masks_everything(self) -> None:
        assert obfuscate_api_key("1234", 0) == "****"

    @pytest.mark.parametrize("key", ["", "1234", "12"])
    def test_short_key_is_dropped(self, key: str) -> None:
        assert obfuscate_api_key(key, 4) is None


@pytest.mark.unit
class TestBuildEvent:
    """
    Tests for projecting records into events.
    """

    def test_default_projection(self, record: AnalyticsRecord) -> None:
        event = build_event(record, ProjectionConfig())

        assert set(event) == DEFAULT_KEYS
        assert event["method"] == "GET"
        assert event["path"] == "/x"
        assert event["response_code"] == 200
        assert event["api_key"] == "1234567890"
        assert event["time_stamp"] == record.timestamp
        assert event["request_time"] == 42
        assert event["raw_response"] == record.raw_response

    def test_default_projection_ignores_redaction(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(obfuscate_api_keys=True, obfuscate_api_keys_length=4)

        assert build_event(record, projection)["api_key"] == "1234567890"

    def test_redacted_api_key(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(
            fields=("api_key",), obfuscate_api_keys=True, obfuscate_api_keys_length=4
        )

        assert build_event(record, projection) == {"api_key": "****7890"}

    def test_short_api_key_is_omitted(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(
            fields=("method", "api_key"),
            obfuscate_api_keys=True,
            obfuscate_api_keys_length=10,
        )

        assert build_event(record, projection) == {"method": "GET"}

    def test_api_key_verbatim_without_redaction(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(fields=("api_key",))

        assert build_event(record, projection) == {"api_key": "1234567890"}

    def test_explicit_projection_keeps_order(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(fields=("ip_address", "method", "response_code"))

        event = build_event(record, projection)

        assert list(event) == ["ip_address", "method", "response_code"]
        assert event == {"ip_address": "10.0.0.1", "method": "GET", "response_code": 200}

    def test_unknown_field_is_skipped(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(fields=("method", "user_agent"))

        assert build_event(record, projection) == {"method": "GET"}

    def test_only_unknown_fields_yield_empty_event(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(fields=("nope",))

        assert build_event(record, projection) == {}

    def test_is_deterministic(self, record: AnalyticsRecord) -> None:
        projection = ProjectionConfig(fields=("path", "api_key"), obfuscate_api_keys=True)

        first = build_event(record, projection)
        second = build_event(record, projection)

        assert first == second
        assert first is not second

    def test_unknown_fields_listed(self) -> None:
        projection = ProjectionConfig(fields=("method", "agent", "pathh"))

        assert projection.unknown_fields() == ["agent", "pathh"]

    def test_negative_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            ProjectionConfig(obfuscate_api_keys_length=-1)
