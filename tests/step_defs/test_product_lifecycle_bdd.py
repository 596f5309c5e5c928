"""
BDD scenarios for the listing lifecycle (pytest-bdd).
Express the create → browse → update → deactivate flow in Gherkin; map to HTTP calls.
"""

from pytest_bdd import given, parsers, scenarios, then, when

from marketplace.core.security import create_identity_token

scenarios("product_lifecycle.feature")


@given(parsers.parse('a seller "{name}" signed in as "{email}"'))
def seller_signed_in(world, name, email):
    token = create_identity_token(f"uid-{name}", email)
    world["headers"][name] = {"Authorization": f"Bearer {token}"}


@when(parsers.parse('"{name}" lists "{title}" in "{category}" for {price} at {lng}, {lat}'))
def list_product(world, api, name, title, category, price, lng, lat):
    payload = {
        "title": title,
        "description": f"{title}, fresh today",
        "price": float(price),
        "category": category,
        "location": {"coordinates": [float(lng), float(lat)], "address": "Market street"},
        "images": ["https://cdn.example.com/photo.jpg"],
        "quantity": 3,
    }
    response = api("POST", "/api/v1/products", headers=world["headers"][name], json=payload)
    if response.status_code == 201 and world["listing_id"] is None:
        world["listing_id"] = response.json()["product"]["id"]


@when(parsers.parse('I browse the "{category}" category'))
def browse_category(world, api, category):
    api("GET", "/api/v1/products", params={"category": category})


@when(parsers.parse("I search within {distance:d} km of {lat}, {lng}"))
def search_nearby(world, api, distance, lat, lng):
    api("GET", "/api/v1/products", params={"lat": float(lat), "lng": float(lng), "distance": distance})


@when(parsers.parse('"{name}" changes the price to {price}'))
def change_price(world, api, name, price):
    api(
        "PUT",
        f"/api/v1/products/{world['listing_id']}",
        headers=world["headers"][name],
        json={"price": float(price)},
    )


@when(parsers.parse('"{name}" deactivates the listing'))
def deactivate(world, api, name):
    api("DELETE", f"/api/v1/products/{world['listing_id']}", headers=world["headers"][name])


@when("I fetch the listing")
def fetch_listing(world, api):
    api("GET", f"/api/v1/products/{world['listing_id']}")


@then(parsers.parse('the listing status should be "{status}"'))
def listing_status(world, status):
    assert world["response"].json()["product"]["status"] == status


@then(parsers.parse("the listing price should be {price}"))
def listing_price(world, price):
    assert world["response"].json()["product"]["price"] == float(price)


@then(parsers.parse('the listing title should be "{title}"'))
def listing_title(world, title):
    assert world["response"].json()["product"]["title"] == title


@then(parsers.parse('the results should include "{title}"'))
def results_include(world, title):
    assert title in [p["title"] for p in world["response"].json()["products"]]


@then(parsers.parse('the results should not include "{title}"'))
def results_exclude(world, title):
    assert title not in [p["title"] for p in world["response"].json()["products"]]
