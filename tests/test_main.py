"""
Brief: Tests for eventdns.main (JSON-lines streaming and CLI entry).

Inputs:
  - None

Outputs:
  - None
"""

import io
import json

import eventdns.main as main_mod
from eventdns.main import main, run_stream


def test_run_stream_filters_each_event(make_filter, scripted_source):
    """
    Brief: run_stream enriches every JSON object and skips bad lines.

    Inputs:
      - make_filter: DnsFilter factory fixture
      - scripted_source: ScriptedSource class fixture

    Outputs:
      - None: Asserts output lines and count
    """
    src = scripted_source(addresses={"a.example": "10.0.0.1"})
    dns_filter = make_filter({"resolve": ["host"], "action": "replace"}, src)
    source = io.StringIO(
        '{"host": "a.example"}\n'
        "\n"
        "not json\n"
        "[1, 2]\n"
        '{"host": "b.example", "msg": "ü"}\n'
    )
    sink = io.StringIO()

    assert run_stream(dns_filter, source, sink) == 2

    lines = sink.getvalue().splitlines()
    assert [json.loads(line) for line in lines] == [
        {"host": "10.0.0.1"},
        {"host": "b.example", "msg": "ü"},
    ]


def test_main_reads_and_writes_files(tmp_path):
    """
    Brief: main loads the config and filters an input file to an output file.

    Inputs:
      - tmp_path: pytest temporary directory

    Outputs:
      - None: Asserts exit code and enriched output
    """
    hosts = tmp_path / "hosts"
    hosts.write_text("192.0.2.10 web.example\n", encoding="utf-8")
    config = tmp_path / "config.yaml"
    config.write_text(
        "logging:\n  level: warn\n"
        "dns:\n"
        "  reverse: [ip]\n"
        f"  hostsfile: ['{hosts}']\n",
        encoding="utf-8",
    )
    events = tmp_path / "in.jsonl"
    events.write_text('{"ip": "192.0.2.10"}\n', encoding="utf-8")
    out = tmp_path / "out.jsonl"

    rc = main(["--config", str(config), "--input", str(events), "--output", str(out)])

    assert rc == 0
    assert json.loads(out.read_text(encoding="utf-8")) == {
        "ip": ["192.0.2.10", "web.example"]
    }


def test_main_uses_stdio_by_default(tmp_path, monkeypatch):
    """
    Brief: "-" input and output map to stdin and stdout.

    Inputs:
      - tmp_path: pytest temporary directory
      - monkeypatch: pytest monkeypatch

    Outputs:
      - None: Asserts stdout content
    """
    config = tmp_path / "config.yaml"
    config.write_text("dns:\n  hostsfile: []\n", encoding="utf-8")
    stdout = io.StringIO()
    monkeypatch.setattr(main_mod.sys, "stdin", io.StringIO('{"a": 1}\n'))
    monkeypatch.setattr(main_mod.sys, "stdout", stdout)

    assert main(["--config", str(config)]) == 0
    assert json.loads(stdout.getvalue()) == {"a": 1}


def test_main_config_errors_exit_1(tmp_path):
    """
    Brief: Missing or invalid configuration returns exit code 1.

    Inputs:
      - tmp_path: pytest temporary directory

    Outputs:
      - None: Asserts exit codes
    """
    assert main(["--config", str(tmp_path / "absent.yaml")]) == 1

    config = tmp_path / "config.yaml"
    config.write_text(
        "dns:\n  nameserver:\n    address: 10.0.0.1\n    ndots: 0\n", encoding="utf-8"
    )
    assert main(["--config", str(config)]) == 1


def test_main_unknown_keys_flag(tmp_path, monkeypatch):
    """
    Brief: --unknown-keys relaxes the default rejection of unknown options.

    Inputs:
      - tmp_path: pytest temporary directory
      - monkeypatch: pytest monkeypatch

    Outputs:
      - None: Asserts exit codes for error and ignore policies
    """
    config = tmp_path / "config.yaml"
    config.write_text("dns:\n  hostsfile: []\n  colour: blue\n", encoding="utf-8")
    monkeypatch.setattr(main_mod.sys, "stdin", io.StringIO(""))
    monkeypatch.setattr(main_mod.sys, "stdout", io.StringIO())

    assert main(["--config", str(config)]) == 1
    assert main(["--config", str(config), "--unknown-keys", "ignore"]) == 0


def test_main_logs_cache_stats(tmp_path, monkeypatch):
    """
    Brief: Counters of enabled caches are logged once the stream ends.

    Inputs:
      - tmp_path: pytest temporary directory
      - monkeypatch: pytest monkeypatch

    Outputs:
      - None: Asserts a cache summary line was logged
    """
    config = tmp_path / "config.yaml"
    config.write_text(
        "dns:\n  resolve: [host]\n  hostsfile: []\n  failed_cache_size: 4\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(main_mod.sys, "stdin", io.StringIO('{"host": "a.example"}\n'))
    monkeypatch.setattr(main_mod.sys, "stdout", io.StringIO())
    messages = []
    monkeypatch.setattr(
        main_mod.logger, "info", lambda msg, *args: messages.append(msg % args)
    )

    assert main(["--config", str(config)]) == 0
    assert any(m.startswith("failed cache: ") and "'size': 1" in m for m in messages)
