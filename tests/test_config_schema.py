"""
Brief: Tests for eventdns.config.config_schema.validate_config.

Inputs:
  - None

Outputs:
  - None
"""

import logging

import pytest

from eventdns.config.config_schema import validate_config
from eventdns.errors import ConfigurationError


def test_valid_config_passes():
    """
    Brief: A complete, well-formed config validates.

    Inputs:
      - None

    Outputs:
      - None: Asserts no exception
    """
    validate_config(
        {
            "logging": {"level": "debug", "stderr": True},
            "dns": {
                "resolve": ["host"],
                "reverse": "ip",
                "action": "replace",
                "nameserver": {"address": ["192.0.2.53"], "search": ["corp"], "ndots": 2},
                "timeout": [0.5, 1.0],
                "max_retries": 3,
                "hit_cache_size": 100,
                "hit_cache_ttl": 30,
                "hostsfile": ["/etc/hosts"],
                "tag_on_timeout": [],
            },
        }
    )


def test_dns_block_required():
    """
    Brief: The dns block must be present.

    Inputs:
      - None

    Outputs:
      - None: Asserts ConfigurationError naming the config path
    """
    with pytest.raises(ConfigurationError, match="dns.yaml"):
        validate_config({"logging": {}}, config_path="dns.yaml")


@pytest.mark.parametrize(
    "dns",
    [
        {"action": "merge"},
        {"timeout": 0},
        {"timeout": []},
        {"max_retries": -1},
        {"resolve": [1, 2]},
    ],
)
def test_type_errors_rejected(dns):
    """
    Brief: Values of the wrong type or range are rejected.

    Inputs:
      - dns: invalid dns block

    Outputs:
      - None: Asserts ConfigurationError
    """
    with pytest.raises(ConfigurationError):
        validate_config({"dns": dns})


def test_unknown_keys_policy(caplog):
    """
    Brief: Unknown keys raise by default and can be ignored or warned about.

    Inputs:
      - caplog: pytest log capture

    Outputs:
      - None: Asserts behaviour for each policy
    """
    cfg = {"dns": {"resolve": ["host"], "colour": "blue"}}
    with pytest.raises(ConfigurationError, match="colour"):
        validate_config(cfg)

    validate_config(cfg, unknown_keys="ignore")

    with caplog.at_level(logging.WARNING):
        validate_config(cfg, unknown_keys="warn")
    assert "colour" in caplog.text

    with pytest.raises(ValueError):
        validate_config(cfg, unknown_keys="sometimes")
