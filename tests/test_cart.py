# tests/test_cart.py
import uuid

import pytest


@pytest.fixture
def cake(make_product):
    return make_product(name="Chocolate cake", stock=5)


@pytest.fixture
def tart(make_product):
    return make_product(name="Lemon tart", stock=2)


def add(client, headers, user_id, product_id, quantity):
    return client.post(
        f"/cart/{user_id}",
        json={"product_id": product_id, "quantity": quantity},
        headers=headers,
    )


# -------- Add --------


def test_add_and_list(client, customer, cake, tart):
    user_id, headers = customer

    assert add(client, headers, user_id, cake["id"], 2).json() == {"msg": "Product added to cart"}
    assert add(client, headers, user_id, tart["id"], 1).status_code == 200

    res = client.get(f"/cart/{user_id}", headers=headers)

    assert res.status_code == 200
    items = res.json()
    assert [(i["id"], i["quantity"]) for i in items] == [(cake["id"], 2), (tart["id"], 1)]
    assert items[0]["image_url"] == "https://images.test/default.png"
    assert items[0]["name"] == "Chocolate cake"


def test_add_up_to_stock_is_allowed(client, customer, cake):
    user_id, headers = customer

    assert add(client, headers, user_id, cake["id"], 5).status_code == 200


def test_add_more_than_stock(client, customer, cake):
    user_id, headers = customer

    res = add(client, headers, user_id, cake["id"], 6)

    assert res.status_code == 400
    assert res.json() == {"errors": [{"msg": "Insufficient stock"}]}
    assert client.get(f"/cart/{user_id}", headers=headers).json() == []


def test_add_duplicate_product(client, customer, cake):
    user_id, headers = customer
    add(client, headers, user_id, cake["id"], 1)

    res = add(client, headers, user_id, cake["id"], 1)

    assert res.status_code == 400
    assert res.json()["errors"][0]["msg"] == "Product already in cart"
    assert len(client.get(f"/cart/{user_id}", headers=headers).json()) == 1


def test_add_unknown_product(client, customer):
    user_id, headers = customer

    res = add(client, headers, user_id, str(uuid.uuid4()), 1)

    assert res.status_code == 404
    assert res.json()["errors"][0]["msg"] == "Invalid product id"


def test_add_unknown_user(client, admin, cake):
    _, headers = admin

    res = add(client, headers, str(uuid.uuid4()), cake["id"], 1)

    assert res.status_code == 404
    assert res.json()["errors"][0]["msg"] == "Invalid user id"


@pytest.mark.parametrize("quantity", [0, -1, "two"])
def test_add_invalid_quantity(client, customer, cake, quantity):
    user_id, headers = customer

    res = add(client, headers, user_id, cake["id"], quantity)

    assert res.status_code == 400
    assert res.json()["errors"][0]["param"] == "quantity"


def test_stock_is_not_consumed(client, customer, other_customer, cake):
    user_id, headers = customer
    other_id, other_headers = other_customer

    add(client, headers, user_id, cake["id"], 5)

    assert add(client, other_headers, other_id, cake["id"], 5).status_code == 200
    assert client.get(f"/products/{cake['id']}").json()["stock"] == 5


# -------- Update --------


def test_update_quantity(client, customer, cake):
    user_id, headers = customer
    add(client, headers, user_id, cake["id"], 1)

    res = client.put(f"/cart/{user_id}/{cake['id']}", json={"quantity": 4}, headers=headers)

    assert res.status_code == 200
    assert res.json() == {"msg": "Product quantity updated"}
    assert client.get(f"/cart/{user_id}", headers=headers).json()[0]["quantity"] == 4


def test_update_product_not_in_cart(client, customer, cake):
    user_id, headers = customer

    res = client.put(f"/cart/{user_id}/{cake['id']}", json={"quantity": 1}, headers=headers)

    assert res.status_code == 404
    assert res.json()["errors"][0]["msg"] == "Product not in cart"


def test_update_beyond_stock(client, customer, cake):
    user_id, headers = customer
    add(client, headers, user_id, cake["id"], 1)

    res = client.put(f"/cart/{user_id}/{cake['id']}", json={"quantity": 6}, headers=headers)

    assert res.status_code == 400
    assert client.get(f"/cart/{user_id}", headers=headers).json()[0]["quantity"] == 1


# -------- Remove --------


def test_remove_item(client, customer, cake, tart):
    user_id, headers = customer
    add(client, headers, user_id, cake["id"], 1)
    add(client, headers, user_id, tart["id"], 1)

    res = client.delete(f"/cart/{user_id}/{cake['id']}", headers=headers)

    assert res.status_code == 200
    assert res.json() == {"msg": "Product removed from cart"}
    assert [i["id"] for i in client.get(f"/cart/{user_id}", headers=headers).json()] == [tart["id"]]


def test_remove_item_not_in_cart(client, customer, cake):
    user_id, headers = customer

    res = client.delete(f"/cart/{user_id}/{cake['id']}", headers=headers)

    assert res.status_code == 404


def test_deleted_product_disappears_from_cart(client, admin, customer, cake, tart):
    _, admin_headers = admin
    user_id, headers = customer
    add(client, headers, user_id, cake["id"], 1)
    add(client, headers, user_id, tart["id"], 2)

    client.delete(f"/products/{cake['id']}", headers=admin_headers)

    items = client.get(f"/cart/{user_id}", headers=headers).json()
    assert [(i["id"], i["quantity"]) for i in items] == [(tart["id"], 2)]


# -------- Ownership --------


def test_cart_requires_authentication(client, customer):
    user_id, _ = customer

    assert client.get(f"/cart/{user_id}").status_code == 401


def test_other_user_cannot_touch_cart(client, customer, other_customer, cake):
    user_id, headers = customer
    _, other_headers = other_customer
    add(client, headers, user_id, cake["id"], 1)

    assert client.get(f"/cart/{user_id}", headers=other_headers).status_code == 403
    assert add(client, other_headers, user_id, cake["id"], 1).status_code == 403
    assert client.put(
        f"/cart/{user_id}/{cake['id']}", json={"quantity": 2}, headers=other_headers
    ).status_code == 403
    assert client.delete(f"/cart/{user_id}/{cake['id']}", headers=other_headers).status_code == 403


def test_admin_can_manage_any_cart(client, admin, customer, cake, tart):
    _, admin_headers = admin
    user_id, headers = customer

    assert add(client, admin_headers, user_id, cake["id"], 1).status_code == 200
    assert client.put(
        f"/cart/{user_id}/{cake['id']}", json={"quantity": 3}, headers=admin_headers
    ).status_code == 200
    assert add(client, admin_headers, user_id, tart["id"], 1).status_code == 200
    assert client.delete(f"/cart/{user_id}/{tart['id']}", headers=admin_headers).status_code == 200

    res = client.get(f"/cart/{user_id}", headers=admin_headers)
    assert res.status_code == 200
    assert [(i["id"], i["quantity"]) for i in res.json()] == [(cake["id"], 3)]
