import io
import os
import tempfile

# configure before anything imports tinda settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="tinda-media-")
os.environ["GEMINI_API_KEY"] = ""
os.environ["ADMIN_EMAIL"] = "admin@tindaph.com"
os.environ["ADMIN_PASSWORD"] = "admin-password"

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from tinda.core.database import Base, engine
from tinda.main import app

ADMIN_CREDENTIALS = {"email": "admin@tindaph.com", "password": "admin-password"}


def make_image(width=1200, height=600, fmt="PNG", mode="RGB") -> bytes:
    buf = io.BytesIO()
    color = (30, 120, 200) if mode == "RGB" else (30, 120, 200, 128)
    Image.new(mode, (width, height), color=color).save(buf, format=fmt)
    return buf.getvalue()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    def _register(
        email,
        name="Juan Dela Cruz",
        role="USER",
        region="NCR",
        province="Metro Manila",
        city="Quezon City",
        password="password123",
    ):
        resp = client.post(
            "/auth/register",
            json={
                "email": email,
                "password": password,
                "name": name,
                "role": role,
                "region": region,
                "province": province,
                "city": city,
            },
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return auth_header(body["access_token"]), body["user"]

    return _register


@pytest.fixture
def admin_headers(client):
    resp = client.post("/auth/login", json=ADMIN_CREDENTIALS)
    assert resp.status_code == 200, resp.text
    return auth_header(resp.json()["access_token"])


@pytest.fixture
def create_listing(client):
    def _create(headers, title="iPhone 13 Pro Max", category="Electronics", price="35000", images=1):
        files = [
            ("files", (f"photo{i}.png", make_image(), "image/png")) for i in range(images)
        ]
        return client.post(
            "/listings/",
            data={
                "title": title,
                "price": price,
                "category": category,
                "condition": "Used",
                "description": "Meetup Trinoma.",
            },
            files=files or None,
            headers=headers,
        )

    return _create


@pytest.fixture
def active_listing(client, register, create_listing, admin_headers):
    """An approved listing and its seller's auth header."""
    seller_headers, seller = register("seller@example.com", name="Maria Clara", role="SELLER")
    resp = create_listing(seller_headers)
    assert resp.status_code == 201, resp.text
    listing = resp.json()
    resp = client.patch(
        f"/listings/{listing['id']}/status", json={"status": "active"}, headers=admin_headers
    )
    assert resp.status_code == 200, resp.text
    return resp.json(), seller_headers, seller
