from __future__ import annotations

import sys
import time
import unittest
from pathlib import Path

import httpx
import jwt

_SECRET = "mockserver-control-plane-test-secret-key"


class TestControlPlaneJwt(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        repo_root = Path(__file__).resolve().parents[1]
        cls.paths = [repo_root / "clients" / "python" / "src"]
        for path in cls.paths:
            sys.path.insert(0, str(path))

        import mockserver_client as package  # noqa: E402
        from mockserver_client import auth  # noqa: E402
        from mockserver_client.transport import HttpTransport  # noqa: E402

        cls.package = package
        cls.auth = auth
        cls.HttpTransport = HttpTransport

    @classmethod
    def tearDownClass(cls) -> None:
        for path in cls.paths:
            try:
                sys.path.remove(str(path))
            except ValueError:
                pass

    def test_static_token(self) -> None:
        supplier = self.auth.static_token("abc")
        self.assertEqual(supplier(), "abc")
        self.assertEqual(supplier(), "abc")

    def test_minted_token_carries_claims(self) -> None:
        supplier = self.auth.JwtSupplier(
            key=_SECRET,
            algorithm="HS256",
            issuer="https://issuer.example",
            audience="mockserver",
            subject="ci",
            claims={"scope": "control-plane"},
        )
        decoded = jwt.decode(
            supplier(),
            _SECRET,
            algorithms=["HS256"],
            audience="mockserver",
            issuer="https://issuer.example",
        )
        self.assertEqual(decoded["sub"], "ci")
        self.assertEqual(decoded["scope"], "control-plane")
        self.assertEqual(decoded["exp"] - decoded["iat"], 300)
        self.assertIn("jti", decoded)

    def test_token_is_reused_until_refresh_margin(self) -> None:
        now = [1_000_000.0]
        supplier = self.auth.JwtSupplier(
            key=_SECRET,
            algorithm="HS256",
            ttl_seconds=60,
            refresh_margin_seconds=10,
            clock=lambda: now[0],
        )
        first = supplier()
        now[0] += 49
        self.assertEqual(supplier(), first)
        now[0] += 1
        self.assertNotEqual(supplier(), first)

    def test_invalid_lifetimes_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.auth.JwtSupplier(key=_SECRET, ttl_seconds=0)
        with self.assertRaises(ValueError):
            self.auth.JwtSupplier(key=_SECRET, ttl_seconds=30, refresh_margin_seconds=30)

    def test_supplier_is_called_per_request(self) -> None:
        headers: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            headers.append(request.headers["authorization"])
            return httpx.Response(200)

        client = self.package.MockServerClient(
            "127.0.0.1",
            1080,
            transport=self.HttpTransport(transport=httpx.MockTransport(handler)),
            event_buses=self.package.EventBusRegistry(),
        )
        client.with_control_plane_jwt(
            self.auth.JwtSupplier(key=_SECRET, algorithm="HS256", audience="mockserver", clock=time.time)
        )
        client.reset()

        token = headers[0].removeprefix("Bearer ")
        decoded = jwt.decode(token, _SECRET, algorithms=["HS256"], audience="mockserver")
        self.assertEqual(decoded["aud"], "mockserver")


if __name__ == "__main__":
    unittest.main()
