"""
Shared fixtures.

FakeBackend stands in for the hosted backend behind an httpx.MockTransport:
PostgREST-style tables under /rest/v1, blob uploads under /storage/v1 and
password/refresh-token auth under /auth/v1.
"""

import json
import uuid
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import httpx
import jwt
import pytest
from fastapi.testclient import TestClient

from storefront.cart import MemoryCartStorage
from storefront.core.config import Settings
from storefront.gateway import GatewayClient
from storefront.main import create_app

BACKEND_URL = "http://backend.test"
ANON_KEY = "anon-key"
JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"

TABLES = ("products", "orders", "order_items", "payments", "users", "lives", "live_products")


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _split_top_level(text: str) -> list[str]:
    parts, depth, current = [], 0, ""
    for ch in text:
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


def _parse_in_list(raw: str) -> list[str]:
    inner = raw[1:-1] if raw.startswith("(") and raw.endswith(")") else raw
    return [item.strip().strip('"') for item in inner.split(",") if item.strip()]


class FakeBackend:
    """In-memory REST + storage + auth backend"""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {name: [] for name in TABLES}
        self.objects: dict[str, bytes] = {}
        self.accounts: dict[str, dict] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.requests: list[httpx.Request] = []
        self.failures: list[tuple[str, str, Callable[[dict], bool], int, str]] = []
        self.offline = False
        self.token_lifetime = timedelta(hours=1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # ==================== Test helpers ====================

    def now_iso(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def seed(self, table: str, **row: Any) -> dict:
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self.now_iso())
        self.tables[table].append(row)
        return row

    def fail(
        self,
        method: str,
        table: str,
        when: Optional[Callable[[dict], bool]] = None,
        status: int = 400,
        message: str = "Backend rejected the request",
    ) -> None:
        """Make matching requests fail; when() sees the request body"""
        self.failures.append((method, table, when or (lambda body: True), status, message))

    def create_account(self, email: str, password: str, full_name: str = "", role: str = "customer") -> dict:
        user_id = str(uuid.uuid4())
        self.accounts[email] = {"id": user_id, "password": password}
        return self.seed(
            "users",
            id=user_id,
            email=email,
            full_name=full_name,
            role=role,
        )

    def mint_token(self, user_id: str, email: str, lifetime: Optional[timedelta] = None) -> str:
        expires = datetime.now(timezone.utc) + (lifetime if lifetime is not None else self.token_lifetime)
        return jwt.encode(
            {"sub": user_id, "email": email, "role": "authenticated", "exp": int(expires.timestamp())},
            JWT_SECRET,
            algorithm="HS256",
        )

    def rows(self, table: str, **match: Any) -> list[dict]:
        return [r for r in self.tables[table] if all(r.get(k) == v for k, v in match.items())]

    # ==================== Transport ====================

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("Connection refused", request=request)

        path = request.url.path
        if path.startswith("/rest/v1/"):
            return self._rest(request, path[len("/rest/v1/"):])
        if path.startswith("/storage/v1/object/"):
            return self._storage(request, path[len("/storage/v1/object/"):])
        if path.startswith("/auth/v1/"):
            return self._auth(request, path[len("/auth/v1/"):])
        return httpx.Response(404, json={"message": "Not found"})

    def _body(self, request: httpx.Request) -> Any:
        if not request.content:
            return None
        try:
            return json.loads(request.content)
        except ValueError:
            return None

    def _injected_failure(self, method: str, table: str, body: Any) -> Optional[httpx.Response]:
        for f_method, f_table, when, status, message in self.failures:
            if f_method == method and f_table == table and when(body if isinstance(body, dict) else {}):
                return httpx.Response(status, json={"message": message, "code": "injected"})
        return None

    # REST

    def _matches(self, row: dict, filters: list[tuple[str, str]]) -> bool:
        for column, expr in filters:
            op, _, raw = expr.partition(".")
            value = _render(row.get(column))
            if op == "eq" and value != raw:
                return False
            if op == "neq" and value == raw:
                return False
            if op == "is" and value != raw:
                return False
            if op == "in" and value not in _parse_in_list(raw):
                return False
        return True

    def _project(self, row: dict, select: str) -> dict:
        out: dict[str, Any] = {}
        for part in _split_top_level(select):
            if part == "*":
                out.update(row)
            elif "(" in part:
                relation, _, inner = part.partition("(")
                relation = relation.strip()
                foreign_key = f"{relation[:-1]}_id"
                target = next((r for r in self.tables.get(relation, []) if r["id"] == row.get(foreign_key)), None)
                out[relation] = self._project(target, inner[:-1]) if target else None
            else:
                out[part] = row.get(part)
        return out

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        if table not in self.tables:
            return httpx.Response(404, json={"message": f"relation {table} does not exist", "code": "42P01"})

        method = request.method
        body = self._body(request)
        injected = self._injected_failure(method, table, body)
        if injected:
            return injected

        params = request.url.params.multi_items()
        reserved = {"select", "order", "limit"}
        filters = [(k, v) for k, v in params if k not in reserved]
        matching = [r for r in self.tables[table] if self._matches(r, filters)]

        if method == "GET":
            query = dict((k, v) for k, v in params if k in reserved)
            if "order" in query:
                column, _, direction = query["order"].partition(".")
                matching.sort(key=lambda r: (r.get(column) is not None, str(r.get(column))), reverse=direction == "desc")
            if "limit" in query:
                matching = matching[: int(query["limit"])]
            rows = [self._project(r, query.get("select", "*")) for r in matching]
            if request.headers.get("Accept") == "application/vnd.pgrst.object+json":
                if len(rows) != 1:
                    return httpx.Response(
                        406,
                        json={"message": "JSON object requested, multiple (or no) rows returned", "code": "PGRST116"},
                    )
                return httpx.Response(200, json=rows[0])
            return httpx.Response(200, json=rows)

        if method == "POST":
            row = dict(body)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self.now_iso())
            self.tables[table].append(row)
            return httpx.Response(201, json=[row])

        if method == "PATCH":
            for row in matching:
                row.update(body)
            return httpx.Response(200, json=matching)

        if method == "DELETE":
            self.tables[table] = [r for r in self.tables[table] if r not in matching]
            return httpx.Response(204)

        return httpx.Response(405, json={"message": "Method not allowed"})

    # Storage

    def _storage(self, request: httpx.Request, key: str) -> httpx.Response:
        bucket = key.split("/", 1)[0]
        injected = self._injected_failure(request.method, f"storage:{bucket}", {})
        if injected:
            return injected
        self.objects[key] = request.content
        return httpx.Response(200, json={"Key": key})

    # Auth

    def _session_payload(self, user_id: str, email: str) -> dict:
        refresh_token = f"refresh-{uuid.uuid4().hex}"
        self.refresh_tokens[refresh_token] = email
        return {
            "access_token": self.mint_token(user_id, email),
            "token_type": "bearer",
            "expires_in": int(self.token_lifetime.total_seconds()),
            "refresh_token": refresh_token,
            "user": {"id": user_id, "email": email},
        }

    def _auth(self, request: httpx.Request, path: str) -> httpx.Response:
        body = self._body(request) or {}
        injected = self._injected_failure(request.method, f"auth:{path}", body)
        if injected:
            return injected

        if path == "signup":
            email = body.get("email")
            if email in self.accounts:
                return httpx.Response(422, json={"code": "user_already_exists", "msg": "User already registered"})
            full_name = (body.get("data") or {}).get("full_name", "")
            profile = self.create_account(email, body.get("password"), full_name)
            return httpx.Response(200, json={"id": profile["id"], "email": email})

        if path == "token":
            grant_type = request.url.params.get("grant_type")
            if grant_type == "password":
                account = self.accounts.get(body.get("email"))
                if not account or account["password"] != body.get("password"):
                    return httpx.Response(
                        400,
                        json={"code": 400, "error_code": "invalid_credentials", "msg": "Invalid login credentials"},
                    )
                return httpx.Response(200, json=self._session_payload(account["id"], body["email"]))
            if grant_type == "refresh_token":
                email = self.refresh_tokens.pop(body.get("refresh_token"), None)
                if not email:
                    return httpx.Response(
                        400,
                        json={"error": "invalid_grant", "error_description": "Invalid Refresh Token: Refresh Token Not Found"},
                    )
                return httpx.Response(200, json=self._session_payload(self.accounts[email]["id"], email))

        if path == "logout":
            return httpx.Response(204)

        return httpx.Response(404, json={"message": "Not found"})


class SlowTransport(httpx.AsyncBaseTransport):
    """Serves FakeBackend after a delay, so concurrent requests interleave"""

    def __init__(self, backend: FakeBackend, delay: float = 0.01):
        self.backend = backend
        self.delay = delay

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(self.delay)
        await request.aread()
        return self.backend.handler(request)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def transport(backend: FakeBackend) -> httpx.MockTransport:
    return httpx.MockTransport(backend.handler)


@pytest.fixture
def gateway(transport: httpx.MockTransport) -> GatewayClient:
    return GatewayClient(BACKEND_URL, ANON_KEY, transport=transport)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        backend_url=BACKEND_URL,
        backend_anon_key=ANON_KEY,
        jwt_secret=JWT_SECRET,
        cart_storage_backend="memory",
    )


@pytest.fixture
def cart_storage() -> MemoryCartStorage:
    return MemoryCartStorage()


@pytest.fixture
def test_client(settings: Settings, transport: httpx.MockTransport, cart_storage: MemoryCartStorage):
    app = create_app(settings, transport=transport, cart_storage=cart_storage)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def product(backend: FakeBackend) -> dict:
    return backend.seed(
        "products",
        name="Gold Hoop Earrings",
        description="14k gold hoops",
        price=1000.0,
        category="Earrings",
        stock=5,
        is_active=True,
        image_url="http://backend.test/storage/v1/object/public/productImages/hoops.jpg",
    )


@pytest.fixture
def second_product(backend: FakeBackend) -> dict:
    return backend.seed(
        "products",
        name="Pearl Pendant",
        description="Freshwater pearl on a silver chain",
        price=500.0,
        category="Necklaces",
        stock=2,
        is_active=True,
    )


@pytest.fixture
def login(test_client: TestClient, backend: FakeBackend) -> Callable[..., dict]:
    """Create an account with the given role and sign the client's session in"""

    def _login(role: str = "customer", email: Optional[str] = None) -> dict:
        email = email or f"{role}-{uuid.uuid4().hex[:6]}@example.com"
        profile = backend.create_account(email, "secret-password", full_name=f"Test {role.title()}", role=role)
        response = test_client.post("/api/auth/login", json={"email": email, "password": "secret-password"})
        assert response.status_code == 200, response.text
        return profile

    return _login
