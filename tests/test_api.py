"""Tests for API endpoints"""
import os

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.index import app
from core.auth.tokens import TokenService
from core.errors import StoreUnavailable
from core.middleware.rate_limit import RateLimitMiddleware
from core.routers.deps import configure_services, get_user_store
from core.services.repositories import InMemoryUserRepository

TEST_SECRET = os.environ["JWT_SECRET"]


@pytest.fixture
def client():
    """Test client"""
    return TestClient(app)


def _signup(client, email="a@x.com", password="pw123", username="alice"):
    response = client.post(
        "/signup", json={"username": username, "email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


def _auth(token):
    return {"auth-token": token}


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "running" in response.text


def test_security_headers(client):
    response = client.get("/api/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


# ==================== SIGNUP / LOGIN ====================

def test_signup_returns_token(client):
    response = client.post(
        "/signup", json={"username": "alice", "email": "a@x.com", "password": "pw123"}
    )
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["token"]
    assert "password" not in response.text


def test_signup_duplicate_email(client):
    _signup(client)
    response = client.post(
        "/signup", json={"username": "other", "email": "a@x.com", "password": "different"}
    )
    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "DuplicateEmail",
        "message": "Existing user found with the same email address",
    }


def test_signup_invalid_email(client):
    response = client.post("/signup", json={"username": "a", "email": "nope", "password": "pw"})
    assert response.status_code == 422


def test_login_success(client):
    _signup(client)
    response = client.post("/login", json={"email": "a@x.com", "password": "pw123"})
    assert response.status_code == 200
    assert response.json()["token"]


def test_login_wrong_password(client):
    _signup(client)
    response = client.post("/login", json={"email": "a@x.com", "password": "bad"})
    assert response.status_code == 400
    assert response.json()["error"] == "WrongPassword"


def test_login_wrong_email(client):
    response = client.post("/login", json={"email": "ghost@x.com", "password": "pw123"})
    assert response.status_code == 400
    assert response.json()["error"] == "WrongEmail"


def test_login_token_works_for_cart(client):
    _signup(client)
    token = client.post("/login", json={"email": "a@x.com", "password": "pw123"}).json()["token"]
    response = client.post("/addtocart", json={"itemId": "42"}, headers=_auth(token))
    assert response.json()["cartData"] == {"42": 1}


# ==================== AUTH GATE ====================

@pytest.mark.parametrize("method", ["get", "post"])
def test_getcart_without_token(client, method):
    response = getattr(client, method)("/getcart")
    assert response.status_code == 401
    assert response.json()["error"] == "MissingToken"


def test_addtocart_without_token(client):
    response = client.post("/addtocart", json={"itemId": "42"})
    assert response.status_code == 401


def test_invalid_token(client):
    response = client.get("/getcart", headers=_auth("garbage"))
    assert response.status_code == 401
    assert response.json()["error"] == "InvalidSignature"


def test_authorization_bearer_header(client):
    token = _signup(client)
    response = client.get("/getcart", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_expired_token(client, clock):
    configure_services(token_service=TokenService(TEST_SECRET, ttl_seconds=3600, clock=clock))
    token = _signup(client)

    clock.advance(hours=1)
    response = client.get("/getcart", headers=_auth(token))

    assert response.status_code == 401
    assert response.json()["error"] == "Expired"


def test_token_for_missing_user(client):
    token = TokenService(TEST_SECRET).issue("no-such-user")
    response = client.get("/getcart", headers=_auth(token))
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


# ==================== CART ====================

def test_new_cart_empty(client):
    token = _signup(client)
    response = client.get("/getcart", headers=_auth(token))
    assert response.status_code == 200
    assert response.json() == {"success": True, "cartData": {}}


def test_cart_end_to_end(client):
    token = _signup(client, email="a@x.com", password="pw123", username="alice")

    r = client.post("/addtocart", json={"itemId": "42"}, headers=_auth(token))
    assert r.json()["cartData"] == {"42": 1}

    r = client.post("/addtocart", json={"itemId": "42"}, headers=_auth(token))
    assert r.json()["cartData"] == {"42": 2}

    r = client.post("/removefromcart", json={"itemId": "42"}, headers=_auth(token))
    assert r.json()["cartData"] == {"42": 1}

    forged = TokenService("a-completely-different-signing-secret-123").issue("whoever")
    r = client.post("/removefromcart", json={"itemId": "42"}, headers=_auth(forged))
    assert r.status_code == 401
    assert r.json()["error"] == "InvalidSignature"

    r = client.post("/getcart", headers=_auth(token))
    assert r.json()["cartData"] == {"42": 1}


def test_forged_token_for_real_user_leaves_cart_unchanged(client):
    token = _signup(client)
    client.post("/addtocart", json={"itemId": "42"}, headers=_auth(token))
    user_id = TokenService(TEST_SECRET).verify(token)

    forged = TokenService("a-completely-different-signing-secret-123").issue(user_id)
    r = client.post("/addtocart", json={"itemId": "42"}, headers=_auth(forged))

    assert r.status_code == 401
    assert client.get("/getcart", headers=_auth(token)).json()["cartData"] == {"42": 1}


def test_remove_nothing_to_remove(client):
    token = _signup(client)
    response = client.post("/removefromcart", json={"itemId": "42"}, headers=_auth(token))
    assert response.status_code == 400
    assert response.json()["error"] == "NothingToRemove"


def test_integer_item_id(client):
    token = _signup(client)
    response = client.post("/addtocart", json={"itemId": 42}, headers=_auth(token))
    assert response.json()["cartData"] == {"42": 1}


def test_missing_item_id(client):
    token = _signup(client)
    response = client.post("/addtocart", json={}, headers=_auth(token))
    assert response.status_code == 422


def test_store_unavailable_is_generic_500(client):
    class DownStore(InMemoryUserRepository):
        async def find_by_id(self, user_id):
            raise StoreUnavailable("db-01.internal refused connection")

    configure_services(user_store=DownStore())
    token = _signup(client)

    response = client.get("/getcart", headers=_auth(token))

    assert response.status_code == 500
    assert response.json()["error"] == "InternalError"
    assert "db-01" not in response.text


def test_users_have_separate_carts(client):
    alice = _signup(client, email="a@x.com")
    bob = _signup(client, email="b@x.com")

    client.post("/addtocart", json={"itemId": "1"}, headers=_auth(alice))

    assert client.get("/getcart", headers=_auth(bob)).json()["cartData"] == {}
    assert len(get_user_store()) == 2


# ==================== PRODUCTS ====================

def test_add_and_list_products(client, sample_product):
    response = client.post("/addproduct", json=sample_product)
    assert response.json() == {"success": True, "name": sample_product["name"]}

    client.post("/addproduct", json={**sample_product, "name": "Second"})
    products = client.get("/allproducts").json()

    assert [p["id"] for p in products] == [1, 2]
    assert products[0]["available"] is True


def test_ids_follow_last_product(client, sample_product):
    for _ in range(3):
        client.post("/addproduct", json=sample_product)
    client.post("/removeproduct", json={"id": 2})
    client.post("/addproduct", json=sample_product)

    assert [p["id"] for p in client.get("/allproducts").json()] == [1, 3, 4]


def test_remove_product(client, sample_product):
    client.post("/addproduct", json=sample_product)

    response = client.post("/removeproduct", json={"id": 1})
    assert response.json() == {"success": True, "id": 1}
    assert client.get("/allproducts").json() == []


def test_remove_missing_product(client):
    response = client.post("/removeproduct", json={"id": 99})
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_new_collections_returns_last_eight(client, sample_product):
    for i in range(10):
        client.post("/addproduct", json={**sample_product, "name": f"P{i}"})

    names = [p["name"] for p in client.get("/newcollections").json()]
    assert names == [f"P{i}" for i in range(2, 10)]


def test_popular_in_women(client, sample_product):
    for i in range(6):
        client.post("/addproduct", json={**sample_product, "name": f"W{i}", "category": "women"})
    client.post("/addproduct", json={**sample_product, "name": "M", "category": "men"})

    products = client.get("/popularinwomen").json()
    assert [p["name"] for p in products] == ["W0", "W1", "W2", "W3"]


def test_upload_image(client):
    response = client.post(
        "/upload", files={"product": ("shirt.png", b"\x89PNG-bytes", "image/png")}
    )
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["image_url"].startswith("http://testserver/images/product_")
    assert body["image_url"].endswith(".png")

    served = client.get("/images/" + body["image_url"].rsplit("/", 1)[1])
    assert served.status_code == 200
    assert served.content == b"\x89PNG-bytes"


def test_upload_without_file(client):
    response = client.post("/upload")
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "No file uploaded"}


# ==================== RATE LIMIT ====================

def test_rate_limit_on_login():
    limited = FastAPI()
    limited.add_middleware(RateLimitMiddleware, requests_per_minute=2)

    @limited.post("/login")
    async def login():
        return {"ok": True}

    @limited.get("/other")
    async def other():
        return {"ok": True}

    limited_client = TestClient(limited)
    assert limited_client.post("/login").status_code == 200
    assert limited_client.post("/login").status_code == 200
    response = limited_client.post("/login")
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"

    for _ in range(5):
        assert limited_client.get("/other").status_code == 200


def _limited_login_app(**kwargs):
    limited = FastAPI()
    limited.add_middleware(RateLimitMiddleware, **kwargs)

    @limited.post("/login")
    async def login():
        return {"ok": True}

    return limited


def test_rate_limit_ignores_spoofed_forwarded_for():
    limited_client = TestClient(_limited_login_app(requests_per_minute=3))

    codes = [
        limited_client.post("/login", headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
        for i in range(20)
    ]

    assert codes[:3] == [200, 200, 200]
    assert set(codes[3:]) == {429}


def test_rate_limit_trusted_proxy_keys_on_forwarded_client():
    limited_client = TestClient(
        _limited_login_app(requests_per_minute=1, trust_forwarded_for=True)
    )

    first = limited_client.post("/login", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
    other = limited_client.post("/login", headers={"X-Forwarded-For": "10.0.0.2"})
    again = limited_client.post("/login", headers={"X-Forwarded-For": "10.0.0.1"})

    assert first.status_code == 200
    assert other.status_code == 200
    assert again.status_code == 429


@pytest.mark.asyncio
async def test_rate_limit_drops_expired_windows():
    now = [1000.0]
    limiter = RateLimitMiddleware(FastAPI(), requests_per_minute=5, clock=lambda: now[0])

    for i in range(50):
        await limiter._hit(f"rate_limit:10.0.0.{i}:/login")
    assert len(limiter._cache) == 50

    now[0] += 61
    assert await limiter._hit("rate_limit:10.0.0.99:/login") == 1
    assert list(limiter._cache) == ["rate_limit:10.0.0.99:/login"]
