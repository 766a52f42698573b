from typing import TYPE_CHECKING, List, Optional

from hecpump.constants import EXIT_CODE_FAILURE, EXIT_CODE_INVALID_CONFIGURATION

if TYPE_CHECKING:
    from hecpump.pump import DeliveryResult


class HECPumpError(Exception):
    """
    Base error for the Splunk pump.

    Args:
        message (str): The error message.
    """
    def __init__(self, message: str = "An error occurred in the Splunk pump."):
        self.message = message
        super().__init__(self.message)

    def get_exit_code(self) -> int:
        """
        Get the exit code associated with this error.

        Returns:
            int: The exit code.
        """
        return EXIT_CODE_FAILURE


class ConfigurationError(HECPumpError):
    """
    Error raised while building the pump. The pump must not be used afterwards.
    """

    def get_exit_code(self) -> int:
        return EXIT_CODE_INVALID_CONFIGURATION


class InvalidSettingsError(ConfigurationError):
    """
    Error raised when required settings are missing or malformed.

    Args:
        reason (Optional[str]): The reason for the error.
        message (str): The error message template.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Empty settings: collector_token and collector_url are required."):
        self.reason = reason
        info = f"\nDetails: {reason}" if reason else ""
        super().__init__(message + info)


class InvalidURLError(ConfigurationError):
    """
    Error raised when the collector URL cannot be parsed.

    Args:
        url (str): The offending URL.
        reason (Optional[str]): The parser error, if any.
        message (str): The error message template.
    """
    def __init__(self, url: str = "", reason: Optional[str] = None,
                 message: str = "Invalid collector URL: {url}"):
        self.url = url
        self.reason = reason
        info = f"\nDetails: {reason}" if reason else ""
        super().__init__(message.format(url=url) + info)


class TLSSetupError(ConfigurationError):
    """
    Error raised when the client certificate pair cannot be loaded.

    Args:
        cert_file (str): The certificate path.
        key_file (str): The private key path.
        reason (Optional[str]): The underlying error.
        message (str): The error message template.
    """
    def __init__(self, cert_file: str = "", key_file: str = "", reason: Optional[str] = None,
                 message: str = "Unable to load the client certificate pair "
                                "(cert: {cert_file!r}, key: {key_file!r}).\n"
                                "Set ssl_cert_file and ssl_key_file, or enable ssl_insecure_skip_verify."):
        self.cert_file = cert_file
        self.key_file = key_file
        self.reason = reason
        info = f"\nDetails: {reason}" if reason else ""
        super().__init__(message.format(cert_file=cert_file, key_file=key_file) + info)


class DeliveryError(HECPumpError):
    """
    Error raised when a single event could not be delivered.
    """


class EventEncodingError(DeliveryError):
    """
    Error raised when an event cannot be serialized to JSON.

    Args:
        reason (Optional[str]): The serializer error.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Unable to encode the event as JSON."):
        self.reason = reason
        info = f"\nDetails: {reason}" if reason else ""
        super().__init__(message + info)


class TransportError(DeliveryError):
    """
    Error raised when the HTTP request fails before a response is received.

    Args:
        reason (Optional[str]): The transport error.
    """
    def __init__(self, reason: Optional[str] = None,
                 message: str = "Unable to reach the HTTP Event Collector."):
        self.reason = reason
        info = f"\nDetails: {reason}" if reason else ""
        super().__init__(message + info)


class DeliveryTimeoutError(DeliveryError):
    """
    Error raised when a deadline expires before delivery completes.

    Args:
        timeout (Optional[float]): The deadline in seconds.
    """
    def __init__(self, timeout: Optional[float] = None,
                 message: str = "Delivery did not complete within {timeout} seconds."):
        self.timeout = timeout
        super().__init__(message.format(timeout=timeout))


class HECStatusError(DeliveryError):
    """
    Error raised in strict status mode when the collector answers with a non-2xx status.

    Args:
        status_code (int): The HTTP status code.
        text (Optional[str]): The HEC error text, if the body carried one.
        code (Optional[int]): The HEC error code, if the body carried one.
    """
    def __init__(self, status_code: int, text: Optional[str] = None, code: Optional[int] = None):
        self.status_code = status_code
        self.text = text
        self.code = code
        detail = f": {text}" if text else ""
        hec_code = f" (HEC code {code})" if code is not None else ""
        super().__init__(f"HTTP Event Collector rejected the event with status {status_code}{hec_code}{detail}")


class BatchDeliveryError(HECPumpError):
    """
    Error raised under the aggregate delivery policy when any event of a batch failed.

    Args:
        failures (List[DeliveryResult]): The failed results, in input order.
        total (int): The size of the batch.
    """
    def __init__(self, failures: List["DeliveryResult"], total: int):
        self.failures = failures
        self.total = total
        indices = ", ".join(str(f.index) for f in failures)
        super().__init__(f"{len(failures)} of {total} events failed to deliver (records: {indices}).")


class InvalidRecordError(HECPumpError):
    """
    Error raised when an input line is not a valid analytics record.

    Args:
        line_number (int): The 1-based line number.
        reason (Optional[str]): The decoding error.
    """
    def __init__(self, line_number: int, reason: Optional[str] = None,
                 message: str = "Invalid analytics record on line {line_number}."):
        self.line_number = line_number
        self.reason = reason
        info = f"\nDetails: {reason}" if reason else ""
        super().__init__(message.format(line_number=line_number) + info)
