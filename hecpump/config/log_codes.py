"""
Log codes for configuration and delivery operations.
"""

CONFIG = "config"

# Settings
SETTINGS = f"{CONFIG}.settings"
SETTINGS_RESOLVED = f"{SETTINGS}.resolved"
SETTINGS_FILE_MISSING = f"{SETTINGS}.file_missing"
SETTINGS_FILE_MISSING_SECTION = f"{SETTINGS}.missing_section"

# TLS Configuration
TLS = f"{CONFIG}.tls"
TLS_VERIFY_DISABLED = f"{TLS}.verify_disabled"
TLS_CLIENT_CERT_LOADED = f"{TLS}.client_cert_loaded"
TLS_CLIENT_CERT_FAILED = f"{TLS}.client_cert_failed"

# Delivery
DELIVERY = "delivery"
DELIVERY_SENT = f"{DELIVERY}.sent"
DELIVERY_FAILED = f"{DELIVERY}.failed"
DELIVERY_BATCH_DONE = f"{DELIVERY}.batch_done"
DELIVERY_CLIENT_REBUILT = f"{DELIVERY}.client_rebuilt"

# Projection
PROJECTION = "projection"
PROJECTION_UNKNOWN_FIELD = f"{PROJECTION}.unknown_field"
