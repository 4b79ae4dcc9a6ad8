from decimal import Decimal
from pathlib import Path

from tinda.services.description_writer import NO_API_KEY_TEXT, DescriptionWriter, get_description_writer
from tinda.main import app
from tinda.services import media_store

from conftest import make_image


def feed_ids(client, headers=None, **params):
    resp = client.get("/listings/", params=params, headers=headers or {})
    assert resp.status_code == 200, resp.text
    return [l["id"] for l in resp.json()]


def test_create_listing_defaults_to_pending(client, register, create_listing):
    headers, seller = register("seller@example.com", name="Maria Clara", role="SELLER")

    resp = create_listing(headers, price="800")

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["status"] == "pending"
    assert body["seller_id"] == seller["id"]
    assert body["seller_name"] == "Maria Clara"
    assert Decimal(body["price"]) == Decimal("800")
    assert body["location"] == seller["location"]
    assert len(body["images"]) == 1
    assert body["images"][0].startswith(f"/media/listings/{body['id']}/")
    assert body["views"] == 0 and body["likes"] == 0


def test_create_listing_requires_image(client, register, create_listing, admin_headers):
    headers, _ = register("seller@example.com")

    resp = create_listing(headers, images=0)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Image is required"
    assert client.get("/admin/moderation-queue", headers=admin_headers).json() == []


def test_create_listing_rejects_unknown_category(client, register, create_listing):
    headers, _ = register("seller@example.com")
    resp = create_listing(headers, category="Spaceships")
    assert resp.status_code == 400


def test_broken_image_leaves_nothing_behind(client, register, admin_headers):
    headers, _ = register("seller@example.com")

    resp = client.post(
        "/listings/",
        data={"title": "Broken", "price": "10", "category": "Other"},
        files=[
            ("files", ("ok.png", make_image(), "image/png")),
            ("files", ("bad.png", b"not really a png", "image/png")),
        ],
        headers=headers,
    )

    assert resp.status_code == 400
    assert client.get("/admin/moderation-queue", headers=admin_headers).json() == []


def test_create_listing_requires_login(client, create_listing):
    assert create_listing({}).status_code == 401


def test_moderation_controls_feed_visibility(client, register, create_listing, admin_headers):
    seller_headers, _ = register("seller@example.com", role="SELLER")
    buyer_headers, _ = register("buyer@example.com")
    listing_id = create_listing(seller_headers).json()["id"]

    assert listing_id not in feed_ids(client)
    assert listing_id not in feed_ids(client, buyer_headers)
    assert listing_id in feed_ids(client, admin_headers)

    resp = client.patch(f"/listings/{listing_id}/status", json={"status": "active"}, headers=admin_headers)
    assert resp.status_code == 200
    assert listing_id in feed_ids(client, buyer_headers)

    resp = client.patch(f"/listings/{listing_id}/status", json={"status": "rejected"}, headers=admin_headers)
    assert resp.status_code == 200
    assert listing_id not in feed_ids(client, buyer_headers)


def test_status_permissions(client, register, active_listing, admin_headers):
    listing, seller_headers, _ = active_listing
    other_headers, _ = register("other@example.com")
    url = f"/listings/{listing['id']}/status"

    assert client.patch(url, json={"status": "rejected"}, headers=seller_headers).status_code == 403
    assert client.patch(url, json={"status": "sold"}, headers=other_headers).status_code == 403
    assert client.patch(url, json={"status": "pending"}, headers=admin_headers).status_code == 422

    resp = client.patch(url, json={"status": "sold"}, headers=seller_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "sold"


def test_feed_prefers_nearby_listings(client, register, create_listing, admin_headers):
    cebu_headers, _ = register(
        "cebu@example.com", region="Region VII (Central Visayas)", province="Cebu", city="Cebu City"
    )
    manila_headers, _ = register("manila@example.com", city="Manila")
    makati_headers, _ = register("makati@example.com", city="Makati")

    ids = {}
    for name, headers in (("manila", manila_headers), ("makati", makati_headers), ("cebu", cebu_headers)):
        ids[name] = create_listing(headers, title=f"Item from {name}").json()["id"]
        client.patch(f"/listings/{ids[name]}/status", json={"status": "active"}, headers=admin_headers)

    viewer_headers, _ = register("viewer@example.com", city="Makati")
    ranked = feed_ids(client, viewer_headers)

    # same city, then same province, then other region
    assert ranked == [ids["makati"], ids["manila"], ids["cebu"]]


def test_feed_category_and_search_filters(client, register, create_listing, admin_headers):
    headers, _ = register("seller@example.com")
    phone = create_listing(headers, title="iPhone 13", category="Electronics").json()["id"]
    jacket = create_listing(headers, title="Vintage Denim Jacket", category="Fashion").json()["id"]
    for listing_id in (phone, jacket):
        client.patch(f"/listings/{listing_id}/status", json={"status": "active"}, headers=admin_headers)

    assert set(feed_ids(client, category="All")) == {phone, jacket}
    assert feed_ids(client, category="Fashion") == [jacket]
    assert feed_ids(client, category="fashion") == []
    assert feed_ids(client, search="IPHONE") == [phone]


def test_get_listing_counts_views_and_hides_pending(client, register, create_listing, active_listing):
    listing, _, _ = active_listing

    first = client.get(f"/listings/{listing['id']}").json()
    second = client.get(f"/listings/{listing['id']}").json()
    assert second["views"] == first["views"] + 1

    owner_headers, _ = register("owner@example.com")
    pending_id = create_listing(owner_headers).json()["id"]
    assert client.get(f"/listings/{pending_id}").status_code == 404
    assert client.get(f"/listings/{pending_id}", headers=owner_headers).status_code == 200


def test_update_and_delete_own_listing(client, register, active_listing):
    listing, seller_headers, _ = active_listing
    stranger_headers, _ = register("stranger@example.com")
    url = f"/listings/{listing['id']}"

    assert client.put(url, json={"title": "Hacked"}, headers=stranger_headers).status_code == 403

    resp = client.put(url, json={"title": "iPhone 13 (price drop)", "price": "30000"}, headers=seller_headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "iPhone 13 (price drop)"
    assert Decimal(resp.json()["price"]) == Decimal("30000")

    assert client.delete(url, headers=stranger_headers).status_code == 403
    assert client.delete(url, headers=seller_headers).status_code == 204
    assert client.get(url).status_code == 404


def test_like_listing(client, register, active_listing):
    listing, _, _ = active_listing
    fan_headers, _ = register("fan@example.com")

    resp = client.post(f"/listings/{listing['id']}/like", headers=fan_headers)
    assert resp.status_code == 200
    assert resp.json()["likes"] == 1


def test_listing_images_append_and_delete(client, register, active_listing):
    listing, seller_headers, _ = active_listing
    url = f"/listings/{listing['id']}/images"

    resp = client.post(
        url,
        files=[("files", ("extra.jpg", make_image(fmt="JPEG"), "image/jpeg"))],
        headers=seller_headers,
    )
    assert resp.status_code == 201, resp.text
    assert len(resp.json()["uploaded"]) == 1

    images = client.get(url, headers=seller_headers).json()
    assert len(images) == 2

    filename = images[0].rsplit("/", 1)[-1]
    assert client.delete(f"{url}/{filename}", headers=seller_headers).status_code == 204
    assert client.get(url, headers=seller_headers).json() == images[1:]

    # served from the media mount
    assert client.get(images[1]).status_code == 200


def test_listing_images_reject_bad_uploads(client, register, active_listing):
    listing, seller_headers, _ = active_listing
    other_headers, _ = register("other@example.com")
    url = f"/listings/{listing['id']}/images"

    gif = client.post(url, files=[("files", ("anim.gif", b"GIF89a", "image/gif"))], headers=seller_headers)
    assert gif.status_code == 400

    foreign = client.post(
        url, files=[("files", ("x.png", make_image(), "image/png"))], headers=other_headers
    )
    assert foreign.status_code == 403


def test_describe_without_api_key_falls_back(client, register):
    headers, _ = register("writer@example.com")

    resp = client.post(
        "/listings/describe",
        json={"title": "Mountain Bike", "category": "Hobbies", "condition": "Used"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["description"] == NO_API_KEY_TEXT


def test_describe_requires_title(client, register):
    headers, _ = register("writer@example.com")
    resp = client.post("/listings/describe", json={"title": "  "}, headers=headers)
    assert resp.status_code == 400


def test_describe_uses_writer(client, register):
    class StubWriter(DescriptionWriter):
        async def generate(self, prompt):
            return "Sulit na sulit! ✨"

    app.dependency_overrides[get_description_writer] = lambda: StubWriter()
    headers, _ = register("writer@example.com")

    resp = client.post("/listings/describe", json={"title": "Rice cooker"}, headers=headers)
    assert resp.json()["description"] == "Sulit na sulit! ✨"


def test_failed_image_write_rolls_back_listing(client, register, admin_headers, monkeypatch, tmp_path):
    headers, _ = register("seller@example.com")
    monkeypatch.setattr(media_store.settings, "media_root", tmp_path)

    real_write_bytes = Path.write_bytes
    calls = []

    def flaky_write_bytes(self, data):
        calls.append(self)
        if len(calls) == 2:
            raise OSError("disk full")
        return real_write_bytes(self, data)

    monkeypatch.setattr(Path, "write_bytes", flaky_write_bytes)

    resp = client.post(
        "/listings/",
        data={"title": "Two photos", "price": "10", "category": "Other"},
        files=[
            ("files", ("one.png", make_image(), "image/png")),
            ("files", ("two.png", make_image(), "image/png")),
        ],
        headers=headers,
    )

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Could not store listing images"
    assert len(calls) == 2
    assert client.get("/admin/moderation-queue", headers=admin_headers).json() == []
    assert [p for p in tmp_path.rglob("*") if p.is_file()] == []
