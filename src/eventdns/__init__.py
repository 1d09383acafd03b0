"""eventdns package"""

from .errors import ConfigurationError
from .event import DictEvent, Event
from .filters.dns_filter import DnsFilter, DnsFilterConfig

__all__ = ["ConfigurationError", "DictEvent", "DnsFilter", "DnsFilterConfig", "Event"]
