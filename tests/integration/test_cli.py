"""
Integration tests for the perflab command line.
"""

import pytest

from perflab.__main__ import build_config, build_parser, main


class TestArgumentParsing:
    """Tests for build_parser / build_config."""

    def test_flags_override_env(self, monkeypatch):
        """Command-line flags win over PERFLAB_* variables."""
        monkeypatch.setenv("PERFLAB_PORT", "9000")
        monkeypatch.setenv("PERFLAB_HEADER_MODE", "1")
        args = build_parser().parse_args(["headers", "--mode", "3"])
        config = build_config(args)
        assert config.header_mode == 3
        assert config.port == 9000

    def test_payload_flags(self):
        """Payload mode and user count come from flags."""
        args = build_parser().parse_args(["payload", "-m", "2", "-u", "10", "-p", "0"])
        config = build_config(args)
        assert config.payload_mode == 2
        assert config.user_count == 10
        assert config.port == 0

    def test_log_flags_after_subcommand(self):
        """--log-level and --log-format also work after the subcommand."""
        args = build_parser().parse_args(
            ["headers", "--once", "--log-level", "DEBUG", "--log-format", "json"]
        )
        assert args.log_level == "DEBUG"
        config = build_config(args)
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_log_flags_before_subcommand_kept(self):
        """A subcommand without the flags keeps the top-level value."""
        args = build_parser().parse_args(["-l", "ERROR", "compare"])
        assert args.log_level == "ERROR"
        assert args.log_format is None

    def test_log_flag_after_subcommand_wins(self):
        """When given twice, the later (subcommand) value is used."""
        args = build_parser().parse_args(["-l", "ERROR", "retention", "-l", "DEBUG"])
        assert args.log_level == "DEBUG"

    def test_dns_and_qos_flags(self):
        """DNS and QoS settings come from their subcommand flags."""
        dns = build_config(build_parser().parse_args(
            ["dns", "-m", "3", "-D", "example.test", "-q", "7"]
        ))
        assert (dns.dns_mode, dns.dns_domain, dns.dns_queries) == (3, "example.test", 7)
        qos = build_config(build_parser().parse_args(["qos", "-m", "2", "-n", "6", "-p", "0"]))
        assert (qos.qos_mode, qos.qos_packets, qos.port) == (2, 6, 0)

    def test_invalid_mode_exits(self):
        """An out-of-range mode is a usage error."""
        with pytest.raises(SystemExit):
            main(["headers", "--mode", "7"])

    def test_command_required(self):
        """A subcommand must be given."""
        with pytest.raises(SystemExit):
            main([])


class TestCommands:
    """End-to-end command runs."""

    def test_compare(self, capsys):
        """compare prints a row per mode."""
        assert main(["--log-level", "WARNING", "compare"]) == 0
        output = capsys.readouterr().out
        for name in ("FULL", "MINIMAL", "COMPRESSED", "CACHED"):
            assert name in output

    def test_headers_once(self, capsys):
        """One compressed round trip against an in-process server."""
        code = main(["--log-level", "WARNING", "headers", "--mode", "2", "--port", "0", "--once"])
        assert code == 0
        output = capsys.readouterr().out
        assert "COMPRESSED HEADERS" in output
        assert "Total requests sent: 1" in output

    def test_payload_once(self, capsys):
        """One all-optimizations payload against an in-process server."""
        code = main(["--log-level", "WARNING", "payload", "--mode", "4", "--port", "0",
                     "--users", "20", "--once"])
        assert code == 0
        output = capsys.readouterr().out
        assert "Server ack" in output
        assert "Total packages sent: 1" in output

    def test_contention(self, capsys):
        """contention prints its report."""
        assert main(["--log-level", "WARNING", "contention", "-t", "2", "-d", "0.1"]) == 0
        assert "Threads: 2" in capsys.readouterr().out

    def test_retention(self, capsys):
        """retention prints its report."""
        assert main(["--log-level", "WARNING", "retention", "-n", "3", "-s", "100"]) == 0
        assert "Reclaimed" in capsys.readouterr().out
