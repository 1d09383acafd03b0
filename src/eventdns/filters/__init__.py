"""Event filters provided by eventdns."""

from .dns_filter import DnsFilter, DnsFilterConfig
from .fields import FieldShape, FieldValue, classify_field

__all__ = ["DnsFilter", "DnsFilterConfig", "FieldShape", "FieldValue", "classify_field"]
