from __future__ import annotations

import sys
import threading
import unittest
from pathlib import Path

import httpx


class _StoppableServer:
    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable
        self.lock = threading.Lock()
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self.lock:
            self.calls.append(request.url.path)
            if not self.reachable:
                raise httpx.ConnectError("connection refused", request=request)
            if request.url.path.endswith("/stop"):
                self.reachable = False
        return httpx.Response(200)

    def count(self, operation: str) -> int:
        with self.lock:
            return sum(1 for path in self.calls if path.endswith("/" + operation))


class TestStopOrchestrator(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        repo_root = Path(__file__).resolve().parents[1]
        cls.paths = [repo_root / "clients" / "python" / "src"]
        for path in cls.paths:
            sys.path.insert(0, str(path))

        import mockserver_client as package  # noqa: E402
        from mockserver_client.transport import HttpTransport  # noqa: E402

        cls.package = package
        cls.HttpTransport = HttpTransport

    @classmethod
    def tearDownClass(cls) -> None:
        for path in cls.paths:
            try:
                sys.path.remove(str(path))
            except ValueError:
                pass

    def setUp(self) -> None:
        self.registry = self.package.EventBusRegistry()
        self.server = _StoppableServer()
        self.transport = self.HttpTransport(transport=httpx.MockTransport(self.server))
        self.client = self.package.MockServerClient(
            "127.0.0.1",
            1080,
            transport=self.transport,
            event_buses=self.registry,
            sleep=lambda seconds: None,
        )

    def test_stop_async_resolves_with_the_client(self) -> None:
        handle = self.client.stop_async()
        self.assertIs(handle.result(timeout=5), self.client)
        self.assertEqual(self.server.count("stop"), 1)
        self.assertTrue(self.transport.is_closed())

    def test_concurrent_stop_async_runs_one_teardown(self) -> None:
        barrier = threading.Barrier(8)
        handles = []
        lock = threading.Lock()

        def stop() -> None:
            barrier.wait()
            handle = self.client.stop_async()
            with lock:
                handles.append(handle)

        threads = [threading.Thread(target=stop) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        self.assertEqual(len(handles), 8)
        self.assertTrue(all(handle is handles[0] for handle in handles))
        self.assertIs(handles[0].result(timeout=5), self.client)
        self.assertEqual(self.server.count("stop"), 1)

    def test_repeated_stop_returns_same_handle(self) -> None:
        first = self.client.stop_async()
        first.result(timeout=5)
        self.assertIs(self.client.stop_async(), first)
        self.client.stop()
        self.assertEqual(self.server.count("stop"), 1)

    def test_stop_confirms_shutdown_with_status_probe(self) -> None:
        self.client.stop()
        self.assertEqual(self.server.count("status"), 1)

    def test_stop_never_raises_when_server_is_gone(self) -> None:
        self.server.reachable = False
        with self.assertLogs("mockserver_client.stop", level="WARNING") as logs:
            self.client.stop()
        self.assertIn("failed to send stop request", logs.output[0])
        self.assertTrue(self.transport.is_closed())

    def test_ignore_failure_suppresses_stop_warning(self) -> None:
        self.server.reachable = False
        with self.assertNoLogs("mockserver_client.stop", level="WARNING"):
            self.client.stop_async(ignore_failure=True).result(timeout=5)

    def test_stop_publishes_event_and_drops_bus(self) -> None:
        events: list[str] = []
        bus = self.client.event_bus
        bus.subscribe(lambda: events.append("stop"), self.package.EventType.STOP)
        bus.subscribe(lambda: events.append("reset"), self.package.EventType.RESET)
        self.assertIn(1080, self.registry)

        self.client.stop()

        self.assertEqual(events, ["stop"])
        self.assertNotIn(1080, self.registry)

    def test_reset_publishes_reset_before_remote_call(self) -> None:
        order: list[str] = []
        self.client.event_bus.subscribe(lambda: order.append(f"reset:{len(self.server.calls)}"))
        self.client.reset()

        self.assertEqual(order, ["reset:0"])
        self.assertEqual(self.server.count("reset"), 1)

    def test_reset_after_stop_leaves_other_clients_alone(self) -> None:
        self.client.stop()

        with self.assertRaises(self.package.ClientClosedError):
            self.client.reset()
        self.assertNotIn(1080, self.registry)

        events: list[str] = []
        replacement = self.package.MockServerClient(
            "127.0.0.1",
            1080,
            transport=self.HttpTransport(transport=httpx.MockTransport(_StoppableServer())),
            event_buses=self.registry,
        )
        replacement.event_bus.subscribe(lambda: events.append("reset"), self.package.EventType.RESET)

        with self.assertRaises(self.package.ClientClosedError):
            self.client.reset()
        self.assertEqual(events, [])

    def test_disconnect_releases_transport_without_stopping_server(self) -> None:
        self.client.reset()
        self.client.disconnect()

        self.assertTrue(self.transport.is_closed())
        self.assertEqual(self.server.count("stop"), 0)
        with self.assertRaisesRegex(self.package.ClientClosedError, "has already been closed"):
            self.client.reset()
        self.assertEqual(self.server.count("reset"), 1)

    def test_lifecycle_queries_after_stop_report_not_running(self) -> None:
        self.client.stop()
        self.assertFalse(self.client.is_running(2, 0.01))
        self.assertTrue(self.client.has_stopped(2, 0.01))

    def test_context_manager_stops_client(self) -> None:
        with self.client as client:
            client.reset()
        self.assertEqual(self.server.count("stop"), 1)
        with self.assertRaises(self.package.ClientClosedError):
            self.client.reset()

    def test_close_is_stop(self) -> None:
        self.client.close()
        self.assertEqual(self.server.count("stop"), 1)
        self.assertTrue(self.client.stop_async().done())


if __name__ == "__main__":
    unittest.main()
