"""
=============================================================================
PERFLAB CLI ENTRY POINT
=============================================================================

    python -m perflab headers                 # interactive header demo
    python -m perflab headers --mode 2 --once # one compressed round trip
    python -m perflab compare                 # offline size table
    python -m perflab payload --mode 4        # interactive payload demo
    python -m perflab dns --mode 1            # cache miss, then hit
    python -m perflab qos --mode 1            # priority-based QoS run
    python -m perflab contention --threads 8  # lock contention workload
    python -m perflab retention               # retained-object workload

Configuration is layered: defaults, then PERFLAB_* environment variables,
then command-line flags.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import DemoConfig
from .console import InteractiveSession, print_banner
from .dns import (
    KEY_LEARNINGS as DNS_LEARNINGS,
    DNSMode,
    run_mode as run_dns_mode,
)
from .exceptions import PerflabError
from .headers import (
    KEY_LEARNINGS as HEADER_LEARNINGS,
    HeaderDemoClient,
    HeaderDemoServer,
    HeaderMode,
    compare_modes,
    render_comparison,
)
from .logging_setup import setup_logging
from .payload import (
    KEY_LEARNINGS as PAYLOAD_LEARNINGS,
    PayloadDemoClient,
    PayloadDemoServer,
    PayloadMode,
)
from .qos import KEY_LEARNINGS as QOS_LEARNINGS, QoSClient, QoSMode, QoSServer
from .report import format_bytes
from .state import DemoState
from .workloads import RetentionDemo, run_contention


logger = logging.getLogger(__name__)


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def _add_network_arguments(parser: argparse.ArgumentParser, mode_help: str):
    parser.add_argument("--mode", "-m", type=int, default=None, help=mode_help)
    parser.add_argument("--host", "-H", default=None, help="Server host (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Server port (default: 8888)")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Send a single request and exit instead of the interactive loop",
    )


def _add_logging_arguments(parser: argparse.ArgumentParser, default=None):
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=default,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=default,
        help="Log output format (default: text)",
    )


def build_parser() -> argparse.ArgumentParser:
    # Accepted after the subcommand too; SUPPRESS keeps a subcommand that
    # omits them from resetting a value given before the subcommand
    common = argparse.ArgumentParser(add_help=False)
    _add_logging_arguments(common, default=argparse.SUPPRESS)

    parser = argparse.ArgumentParser(
        prog="perflab",
        description="Classroom performance and network optimization demos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  perflab headers                       # ENTER to send, 'mode' to cycle, 'quit'
  perflab headers --mode 3 --once       # one conditional request
  perflab compare                       # size of every header mode
  perflab payload --mode 2 --users 500  # binary records
  perflab dns --mode 2 -S 8.8.8.8 -S 1.1.1.1
  perflab qos --mode 3 --log-level DEBUG
  perflab contention --threads 4 --duration 10
  perflab retention --objects 100
        """,
    )
    _add_logging_arguments(parser)
    parser.add_argument("--version", "-v", action="version", version=f"perflab {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    headers = sub.add_parser("headers", parents=[common], help="HTTP header optimization demo")
    _add_network_arguments(headers, "0=Full, 1=Minimal, 2=Compressed, 3=Cached")

    sub.add_parser("compare", parents=[common], help="Offline size comparison of every header mode")

    payload = sub.add_parser("payload", parents=[common], help="Payload encoding/compression demo")
    _add_network_arguments(payload, "0=None, 1=Dedup, 2=Binary, 3=Compress, 4=All")
    payload.add_argument("--users", "-u", type=int, default=None, help="Generated user records")

    dns = sub.add_parser("dns", parents=[common], help="DNS lookup and caching demo")
    dns.add_argument("--mode", "-m", type=int, default=None,
                     help="0=Normal, 1=Cached, 2=Compare servers, 3=Batch")
    dns.add_argument("--domain", "-D", default=None, help="Name to resolve (default: google.com)")
    dns.add_argument("--queries", "-q", type=int, default=None, help="Batch mode query count")
    dns.add_argument("--server", "-S", action="append", default=None, dest="servers",
                     help="DNS server for compare mode (repeatable)")

    qos = sub.add_parser("qos", parents=[common], help="Traffic prioritization (QoS) demo")
    qos.add_argument("--mode", "-m", type=int, default=None,
                     help="0=No QoS, 1=Priority, 2=Dynamic, 3=Security")
    qos.add_argument("--host", "-H", default=None, help="Server host (default: 127.0.0.1)")
    qos.add_argument("--port", "-p", type=int, default=None, help="Server port (default: 8888)")
    qos.add_argument("--packets", "-n", type=int, default=None, help="Packets per traffic class")

    contention = sub.add_parser("contention", parents=[common], help="Threads contending for one lock")
    contention.add_argument("--threads", "-t", type=int, default=4)
    contention.add_argument("--duration", "-d", type=float, default=5.0, help="Seconds")
    contention.add_argument("--keys", "-k", type=int, default=1000, help="Shared map key space")

    retention = sub.add_parser("retention", parents=[common], help="Objects kept alive by module-level roots")
    retention.add_argument("--objects", "-n", type=int, default=50)
    retention.add_argument("--size", "-s", type=int, default=10_000, help="Integers per object")

    return parser


def build_config(args: argparse.Namespace) -> DemoConfig:
    """Defaults < environment < flags."""
    overrides = {
        "log_level": args.log_level,
        "log_format": args.log_format,
        "host": getattr(args, "host", None),
        "port": getattr(args, "port", None),
    }
    if args.command == "headers":
        overrides["header_mode"] = args.mode
    elif args.command == "payload":
        overrides["payload_mode"] = args.mode
        overrides["user_count"] = args.users
    elif args.command == "dns":
        overrides["dns_mode"] = args.mode
        overrides["dns_domain"] = args.domain
        overrides["dns_queries"] = args.queries
    elif args.command == "qos":
        overrides["qos_mode"] = args.mode
        overrides["qos_packets"] = args.packets

    config = DemoConfig.from_env().with_overrides(**overrides)
    config.validate()
    return config


# =============================================================================
# COMMANDS
# =============================================================================

def run_headers(config: DemoConfig, once: bool) -> int:
    state = DemoState(HeaderMode(config.header_mode))
    server = HeaderDemoServer(config, state)
    client = HeaderDemoClient(config, state)

    print_banner("HTTP HEADER OPTIMIZATION DEMONSTRATION", [
        "  - Mode 0: Full headers (HTTP/1.1 with all headers)",
        "  - Mode 1: Minimal headers (remove unnecessary)",
        "  - Mode 2: Compressed headers (HPACK-like)",
        "  - Mode 3: Cached response (304 Not Modified)",
        "",
        f"CURRENT MODE: {config.header_mode}",
        f"WIRESHARK: loopback interface, filter tcp.port == {config.port}",
    ])

    server.serve_in_background()
    try:
        address = server.wait_until_ready()
    except (OSError, TimeoutError) as e:
        print(f"Server failed to start: {e}", file=sys.stderr)
        return 1

    def send():
        result = client.exchange(address=address)
        mode = HeaderMode[result.mode]
        print(f"Request size:  {format_bytes(result.request_bytes)} "
              f"(headers {format_bytes(result.request_header_bytes)})")
        print(f"Response size: {format_bytes(result.response_bytes)} "
              f"(headers {format_bytes(result.response_header_bytes)}), status {result.status}")
        print(f"\n=== HEADER OPTIMIZATION ANALYSIS ===\nMode: {mode.label}")
        for note in mode.notes:
            print(f"- {note}")

    session = InteractiveSession(state, send, noun="request")
    try:
        if once:
            session.send_once()
        else:
            session.run()
    finally:
        server.shutdown()

    print_banner("DEMONSTRATION COMPLETE", [
        "SUMMARY:",
        f"Total requests sent: {session.sent}",
        f"Final mode: {int(state.mode)}",
        f"Server handled: {server.requests_served} requests, "
        f"{format_bytes(server.bytes_received)} in, {format_bytes(server.bytes_sent)} out",
        "",
        "KEY LEARNINGS:",
        *(f"- {line}" for line in HEADER_LEARNINGS),
    ])
    return 0 if session.failed == 0 else 1


def run_compare() -> int:
    print(render_comparison(compare_modes()))
    return 0


def run_payload(config: DemoConfig, once: bool) -> int:
    state = DemoState(PayloadMode(config.payload_mode))
    server = PayloadDemoServer(config)
    client = PayloadDemoClient(config, state)

    print_banner("DATA OPTIMIZATION DEMONSTRATION", [
        "  - Mode 0: JSON (no optimization)",
        "  - Mode 1: Deduplication",
        "  - Mode 2: Binary format",
        "  - Mode 3: Compression",
        "  - Mode 4: All optimizations",
        "",
        f"CURRENT MODE: {config.payload_mode}   USERS: {config.user_count}",
        f"WIRESHARK: loopback interface, filter tcp.port == {config.port}",
    ])

    server.serve_in_background()
    try:
        address = server.wait_until_ready()
    except (OSError, TimeoutError) as e:
        print(f"Server failed to start: {e}", file=sys.stderr)
        return 1

    def send():
        result = client.send(address=address)
        print(f"Mode: {result.mode.label}")
        print(f"JSON size:  {format_bytes(result.json_size)}")
        print(f"Sent:       {format_bytes(result.bytes_sent)} in {result.chunks} chunks")
        print(f"Reduction:  {result.reduction_percent:.2f}%")
        if result.dictionary_entries:
            print(f"Dictionary entries: {result.dictionary_entries}")
        print(f"Server ack: {result.bytes_acked} bytes ({'ok' if result.accepted else 'REJECTED'})")

    session = InteractiveSession(state, send, noun="package")
    try:
        if once:
            session.send_once()
        else:
            session.run()
    finally:
        server.shutdown()

    print_banner("DEMONSTRATION COMPLETE", [
        "SUMMARY:",
        f"Total packages sent: {session.sent}",
        f"Final mode: {int(state.mode)}",
        f"Server decoded: {server.records_decoded} records "
        f"({server.payloads_rejected} payloads rejected)",
        "",
        "KEY LEARNINGS:",
        *(f"- {line}" for line in PAYLOAD_LEARNINGS),
    ])
    return 0 if session.failed == 0 else 1


def run_dns(config: DemoConfig, servers: Optional[List[str]] = None) -> int:
    mode = DNSMode(config.dns_mode)

    print_banner("DNS OPTIMIZATION DEMONSTRATION", [
        "  - Mode 0: Normal query",
        "  - Mode 1: Local cache (miss, then hit)",
        "  - Mode 2: Compare DNS servers",
        "  - Mode 3: Batch queries (cache hit rate)",
        "",
        f"CURRENT MODE: {int(mode)}   DOMAIN: {config.dns_domain}",
        "WIRESHARK: filter udp.port == 53",
    ])

    report = run_dns_mode(
        mode,
        config,
        servers=[(server, server) for server in servers] if servers else None,
    )
    print(f"\n=== MODE {int(mode)}: {mode.label} ===")
    print(report.render())
    for note in mode.notes:
        print(f"- {note}")

    print_banner("DEMONSTRATION COMPLETE", [
        "KEY LEARNINGS:",
        *(f"- {line}" for line in DNS_LEARNINGS),
    ])
    if mode == DNSMode.COMPARE and report.fastest is None:
        return 1
    return 0


def run_qos(config: DemoConfig) -> int:
    mode = QoSMode(config.qos_mode)
    server = QoSServer(config)

    print_banner("QoS (QUALITY OF SERVICE) DEMONSTRATION", [
        "  - Mode 0: No QoS (baseline)",
        "  - Mode 1: Priority-based QoS",
        "  - Mode 2: Dynamic QoS (congestion adaptive)",
        "  - Mode 3: QoS + security integration",
        "",
        f"CURRENT MODE: {int(mode)}   PACKETS PER CLASS: {config.qos_packets}",
        f"WIRESHARK: loopback interface, filter tcp.port == {config.port}",
    ])

    server.serve_in_background()
    try:
        address = server.wait_until_ready()
    except (OSError, TimeoutError) as e:
        print(f"Server failed to start: {e}", file=sys.stderr)
        return 1

    try:
        report = QoSClient(config).run(mode, address=address)
    finally:
        server.shutdown()

    print(report.render())
    print_banner("DEMONSTRATION COMPLETE", [
        "SUMMARY:",
        f"Server acknowledged: {server.total_packets} packets, "
        f"{format_bytes(server.bytes_received)} ({server.suspicious_packets} suspicious)",
        "",
        "KEY LEARNINGS:",
        *(f"- {line}" for line in QOS_LEARNINGS),
    ])
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config.log_level, config.log_format)

    try:
        if args.command == "headers":
            return run_headers(config, args.once)
        if args.command == "compare":
            return run_compare()
        if args.command == "payload":
            return run_payload(config, args.once)
        if args.command == "dns":
            return run_dns(config, args.servers)
        if args.command == "qos":
            return run_qos(config)
        if args.command == "contention":
            print(run_contention(args.threads, args.duration, args.keys).render())
            return 0
        if args.command == "retention":
            print(RetentionDemo(args.objects, args.size).run().render())
            return 0
    except ValueError as e:
        parser.error(str(e))
    except PerflabError as e:
        logger.error(str(e))
        return 1

    parser.error(f"Unknown command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
