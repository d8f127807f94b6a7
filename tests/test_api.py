# tests/test_api.py

import pytest
import logging
from sqlmodel import Session
from app import config
from app.db_models import Product
import app.catalog_service as catalog_module
from conftest import USER, OTHER_USER

test_log = logging.getLogger("tests")

API = "/api/v1/products"


@pytest.fixture
def catalog(make_product):
  names = ["Dell Laptop", "HP Laptop", "Gaming Mouse", "USB-C Cable", "Laptop Stand"]
  return [make_product(name=name, price=100 * (i + 1), rating=i) for i, name in enumerate(names)]


def test_list_products(client, catalog, monkeypatch):
  monkeypatch.setattr(config, "PAGINATION_MAX_LIMIT", 10)

  response = client.get(API)
  assert response.status_code == 200
  data = response.json()
  assert data["total"] == 5
  assert data["max_limit"] == 10
  assert data["max_skip"] == 4
  assert [p["name"] for p in data["products"]][:2] == ["Dell Laptop", "HP Laptop"]
  test_log.info("test_list_products completed successfully.")


def test_list_products_limit_capped(client, catalog, monkeypatch):
  monkeypatch.setattr(config, "PAGINATION_MAX_LIMIT", 2)

  for limit in (1, 2, 3, 50):
    response = client.get(API, params={"limit": limit})
    assert response.status_code == 200
    assert len(response.json()["products"]) == min(limit, 2)


def test_list_products_zero_or_negative_limit_uses_max(client, catalog, monkeypatch):
  monkeypatch.setattr(config, "PAGINATION_MAX_LIMIT", 3)

  assert len(client.get(API, params={"limit": 0}).json()["products"]) == 3
  assert len(client.get(API, params={"limit": -4}).json()["products"]) == 3


def test_list_products_skip_clamped(client, catalog):
  # Past the end -> last product
  response = client.get(API, params={"skip": 100})
  assert response.status_code == 200
  products = response.json()["products"]
  assert [p["name"] for p in products] == ["Laptop Stand"]

  # Negative -> first page
  response = client.get(API, params={"skip": -3})
  assert response.json()["products"][0]["name"] == "Dell Laptop"


def test_list_products_search_case_insensitive(client, catalog):
  response = client.get(API, params={"search": "LAPTOP"})
  assert response.status_code == 200
  names = {p["name"] for p in response.json()["products"]}
  assert names == {"Dell Laptop", "HP Laptop", "Laptop Stand"}
  # total stays the catalog size
  assert response.json()["total"] == 5


def test_list_products_search_wildcards_are_literal(client, catalog):
  response = client.get(API, params={"search": "%"})
  assert response.status_code == 404


def test_list_products_not_found(client, catalog):
  response = client.get(API, params={"search": "nonexistentproduct12345"})
  assert response.status_code == 404
  assert response.json()["detail"] == "Products not found!"


def test_list_products_empty_catalog(client):
  response = client.get(API)
  assert response.status_code == 404


def test_list_products_invalid_limit(client, catalog):
  response = client.get(API, params={"limit": "abc"})
  assert response.status_code == 422


def test_top_products(client, catalog):
  response = client.get(f"{API}/top")
  assert response.status_code == 200
  products = response.json()
  assert [p["rating"] for p in products] == [4, 3, 2]
  assert products[0]["name"] == "Laptop Stand"


def test_top_products_empty_catalog(client):
  response = client.get(f"{API}/top")
  assert response.status_code == 200
  assert response.json() == []


def test_get_product(client, make_product):
  product = make_product(name="Dell Laptop", brand="DELL", price=50000)

  response = client.get(f"{API}/{product.id}")
  assert response.status_code == 200
  data = response.json()
  assert data["name"] == "Dell Laptop"
  assert data["brand"] == "DELL"
  assert data["reviews"] == []


def test_get_product_not_found(client):
  response = client.get(f"{API}/999")
  assert response.status_code == 404
  assert response.json()["detail"] == "Product not found!"


def test_create_product(client):
  body = {
    "name": "Acer Aspire 5",
    "image": "/uploads/aspire.jpg",
    "description": "15 inch laptop",
    "brand": "ACER",
    "category": "Electronics",
    "price": 45000,
    "count_in_stock": 7
  }
  response = client.post(API, json=body, headers=USER)
  assert response.status_code == 200
  data = response.json()
  assert data["message"] == "Product created"
  created = data["created_product"]
  assert created["user_id"] == "user-1"
  assert created["count_in_stock"] == 7
  assert created["rating"] == 0
  assert created["num_reviews"] == 0
  assert created["is_external_product"] is False

  assert client.get(f"{API}/{created['id']}").status_code == 200


def test_create_product_requires_user(client):
  response = client.post(API, json={"name": "No owner"})
  assert response.status_code == 401
  assert response.json()["detail"] == "Not authorized, no user"


def test_create_product_missing_name(client):
  response = client.post(API, json={"price": 10}, headers=USER)
  assert response.status_code == 422


def test_update_product_applies_provided_fields(client, make_product):
  product = make_product(name="Old", brand="HP", price=100, count_in_stock=4)

  response = client.put(f"{API}/{product.id}", json={"name": "New", "price": 250}, headers=USER)
  assert response.status_code == 200
  updated = response.json()["updated_product"]
  assert response.json()["message"] == "Product updated"
  assert updated["name"] == "New"
  assert updated["price"] == 250
  assert updated["brand"] == "HP"
  assert updated["count_in_stock"] == 4


def test_update_product_falsy_values_keep_existing(client, make_product):
  product = make_product(name="Keep", description="Desc", price=100, count_in_stock=4)

  body = {"name": "", "description": "", "price": 0, "count_in_stock": 0, "brand": None}
  response = client.put(f"{API}/{product.id}", json=body, headers=USER)
  assert response.status_code == 200
  updated = response.json()["updated_product"]
  assert updated["name"] == "Keep"
  assert updated["description"] == "Desc"
  assert updated["price"] == 100
  assert updated["count_in_stock"] == 4


def test_update_product_replaces_image(client, make_product, upload_root):
  (upload_root / "uploads").mkdir()
  old_image = upload_root / "uploads" / "old.jpg"
  old_image.write_bytes(b"old")
  product = make_product(name="Pic", image="/uploads/old.jpg")

  response = client.put(f"{API}/{product.id}", json={"image": "/uploads/new.jpg"}, headers=USER)
  assert response.status_code == 200
  assert response.json()["updated_product"]["image"] == "/uploads/new.jpg"
  assert not old_image.exists()


def test_update_product_same_image_kept(client, make_product, upload_root):
  (upload_root / "uploads").mkdir()
  image = upload_root / "uploads" / "same.jpg"
  image.write_bytes(b"img")
  product = make_product(name="Pic", image="/uploads/same.jpg")

  response = client.put(f"{API}/{product.id}", json={"name": "Renamed"}, headers=USER)
  assert response.status_code == 200
  assert image.exists()


def test_update_product_not_found(client):
  response = client.put(f"{API}/999", json={"name": "x"}, headers=USER)
  assert response.status_code == 404


def test_delete_product_removes_record_and_image(client, make_product, upload_root, engine):
  (upload_root / "uploads").mkdir()
  image = upload_root / "uploads" / "gone.jpg"
  image.write_bytes(b"img")
  product = make_product(name="Gone", image="/uploads/gone.jpg")

  response = client.delete(f"{API}/{product.id}", headers=USER)
  assert response.status_code == 200
  assert response.json() == {"message": "Product deleted"}
  assert not image.exists()

  with Session(engine) as fresh:
    assert fresh.get(Product, product.id) is None
  assert client.get(f"{API}/{product.id}").status_code == 404


def test_delete_product_not_found(client):
  response = client.delete(f"{API}/999", headers=USER)
  assert response.status_code == 404


def test_create_review(client, make_product):
  product = make_product(name="Reviewed")

  response = client.post(f"{API}/reviews/{product.id}", json={"rating": 4, "comment": "Good"}, headers=USER)
  assert response.status_code == 201
  assert response.json() == {"message": "Review added"}

  data = client.get(f"{API}/{product.id}").json()
  assert data["num_reviews"] == 1
  assert data["rating"] == 4
  assert data["reviews"][0]["user_id"] == "user-1"
  assert data["reviews"][0]["name"] == "Alice"
  assert data["reviews"][0]["comment"] == "Good"


def test_review_recomputes_average(client, make_product):
  product = make_product(name="Averaged")

  client.post(f"{API}/reviews/{product.id}", json={"rating": 5, "comment": "Great"}, headers=USER)
  client.post(f"{API}/reviews/{product.id}", json={"rating": 2, "comment": "Meh"}, headers=OTHER_USER)

  data = client.get(f"{API}/{product.id}").json()
  assert data["num_reviews"] == 2
  assert data["num_reviews"] == len(data["reviews"])
  assert data["rating"] == pytest.approx(3.5)


def test_second_review_same_user_rejected(client, make_product):
  product = make_product(name="Once")

  first = client.post(f"{API}/reviews/{product.id}", json={"rating": 5, "comment": "Great"}, headers=USER)
  assert first.status_code == 201
  second = client.post(f"{API}/reviews/{product.id}", json={"rating": 1, "comment": "Changed mind"}, headers=USER)
  assert second.status_code == 400
  assert second.json()["detail"] == "Product already reviewed"

  data = client.get(f"{API}/{product.id}").json()
  assert data["num_reviews"] == 1
  assert data["rating"] == 5


def test_review_product_not_found(client):
  response = client.post(f"{API}/reviews/999", json={"rating": 5, "comment": "?"}, headers=USER)
  assert response.status_code == 404


def test_health_and_root(client):
  assert client.get("/health").json() == {"status": "ok"}
  assert "/api/v1/products" in client.get("/").json()["messages"]


def test_global_exception_handler(client, monkeypatch, caplog):
  def broken_top(session, count=3):
    raise ValueError("This is a test error.")

  monkeypatch.setattr(catalog_module, "get_top_products", broken_top)

  with caplog.at_level("ERROR"):
    response = client.get(f"{API}/top")
  assert response.status_code == 500
  assert response.json() == {"detail": "Internal Server Error"}
  assert any("This is a test error." in message for message in caplog.messages)
