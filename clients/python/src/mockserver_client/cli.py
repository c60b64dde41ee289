from __future__ import annotations

import argparse
import logging
import sys

import httpx

from mockserver_client import __version__
from mockserver_client.client import MockServerClient
from mockserver_client.config import ClientSettings
from mockserver_client.errors import MockServerClientError, VerificationFailure
from mockserver_client.models import ClearType, ExpectationId, Format, RetrieveType

_RETRIEVE_TYPES = {
    "requests": RetrieveType.REQUESTS,
    "request-responses": RetrieveType.REQUEST_RESPONSES,
    "recorded-expectations": RetrieveType.RECORDED_EXPECTATIONS,
    "active-expectations": RetrieveType.ACTIVE_EXPECTATIONS,
    "logs": RetrieveType.LOGS,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mockserver-client")
    parser.add_argument("--version", action="version", version=f"mockserver-client {__version__}")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=1080)
    parser.add_argument("--context-path", default="")
    parser.add_argument("--secure", action="store_true", help="Use HTTPS for control-plane requests")
    parser.add_argument("--jwt", type=str, help="Bearer token sent with every control-plane request")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Poll until MockServer reports it is running")
    status.add_argument("--attempts", type=int, default=10)
    status.add_argument("--interval", type=float, default=0.5)

    sub.add_parser("reset", help="Clear all expectations and recorded requests")

    clear = sub.add_parser("clear", help="Clear expectations and/or logs")
    clear.add_argument("--type", default="all", choices=[t.value.lower() for t in ClearType])
    clear.add_argument("--expectation-id", type=str)

    retrieve = sub.add_parser("retrieve", help="Print recorded state")
    retrieve.add_argument("--type", default="requests", choices=sorted(_RETRIEVE_TYPES))
    retrieve.add_argument("--format", default="json", choices=[f.value.lower() for f in Format])

    sub.add_parser("verify-zero", help="Fail unless MockServer has received no requests")
    sub.add_parser("stop", help="Stop MockServer")
    return parser


def _run(client: MockServerClient, args: argparse.Namespace) -> int:
    if args.command == "status":
        running = client.is_running(args.attempts, args.interval)
        sys.stdout.write("running\n" if running else "not running\n")
        return 0 if running else 1

    if args.command == "reset":
        client.reset()
        return 0

    if args.command == "clear":
        target = ExpectationId(id=args.expectation_id) if args.expectation_id else None
        client.clear(target, ClearType(args.type.upper()))
        return 0

    if args.command == "retrieve":
        retrieve_type = _RETRIEVE_TYPES[args.type]
        fmt = Format(args.format.upper())
        if retrieve_type is RetrieveType.LOGS:
            text = client.retrieve_log_messages()
        elif retrieve_type is RetrieveType.REQUESTS:
            text = client.retrieve_recorded_requests_raw(None, fmt)
        elif retrieve_type is RetrieveType.REQUEST_RESPONSES:
            text = client.retrieve_recorded_requests_and_responses_raw(None, fmt)
        elif retrieve_type is RetrieveType.RECORDED_EXPECTATIONS:
            text = client.retrieve_recorded_expectations_raw(None, fmt)
        else:
            text = client.retrieve_active_expectations_raw(None, fmt)
        sys.stdout.write(text if text.endswith("\n") else text + "\n")
        return 0

    if args.command == "verify-zero":
        try:
            client.verify_zero_interactions()
        except VerificationFailure as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
        return 0

    client.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = ClientSettings.from_env()
    http_client = None
    client = None
    if not settings.control_plane_tls_mutual_authentication_required:
        http_client = httpx.Client(verify=False, follow_redirects=False)
    try:
        client = MockServerClient(
            args.host,
            args.port,
            args.context_path,
            settings=settings,
            http_client=http_client,
        )
        if args.secure:
            client.with_secure(True)
        if args.jwt:
            client.with_control_plane_jwt(args.jwt)
        return _run(client, args)
    except MockServerClientError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    finally:
        # stop() would also stop the server
        if client is not None:
            client.disconnect()
        if http_client is not None:
            http_client.close()


if __name__ == "__main__":
    raise SystemExit(main())
