from .settings import DeliveryPolicy, SplunkPumpConfig, decode_config, get_pump_config
from .tls import TLSConfig, build_tls_config

__all__ = [
    "DeliveryPolicy",
    "SplunkPumpConfig",
    "decode_config",
    "get_pump_config",
    "TLSConfig",
    "build_tls_config",
]
