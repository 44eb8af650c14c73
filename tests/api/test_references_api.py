async def test_create_and_list_catalogs(client, admin_headers):
    response = await client.post("/catalogs", headers=admin_headers, json={"name": "Spring Sale"})

    assert response.status_code == 201
    assert response.json()["data"]["product_count"] == 0
    assert "X-Restored" not in response.headers

    response = await client.get("/catalogs", headers=admin_headers)
    assert response.json()["count"] == 1


async def test_duplicate_name_conflicts(client, admin_headers):
    await client.post("/brands", headers=admin_headers, json={"name": "Bosch"})

    response = await client.post("/brands", headers=admin_headers, json={"name": "BOSCH"})

    assert response.status_code == 409
    assert response.json()["success"] is False


async def test_recreating_deleted_row_restores_it(client, admin_headers):
    response = await client.post("/vehicle-types", headers=admin_headers, json={"name": "Truck"})
    vehicle_type_id = response.json()["data"]["id"]
    await client.delete(f"/vehicle-types/{vehicle_type_id}", headers=admin_headers)

    response = await client.post("/vehicle-types", headers=admin_headers, json={"name": "Truck"})

    assert response.status_code == 201
    assert response.headers["X-Restored"] == "true"
    assert response.json()["data"]["id"] == vehicle_type_id


async def test_sub_category_requires_category(client, admin_headers, parents):
    response = await client.post("/sub-categories", headers=admin_headers, json={
        "name": "Gaskets", "category_id": parents["category"].id
    })
    assert response.status_code == 201
    assert response.json()["data"]["category_id"] == parents["category"].id

    response = await client.post("/sub-categories", headers=admin_headers, json={
        "name": "Gaskets", "category_id": 9999
    })
    assert response.status_code == 404


async def test_websites_are_unique_by_url(client, admin_headers):
    await client.post("/websites", headers=admin_headers, json={
        "name": "Shop", "url": "https://shop.example.com"
    })

    response = await client.post("/websites", headers=admin_headers, json={
        "name": "Shop again", "url": "https://shop.example.com/"
    })

    assert response.status_code == 409


async def test_vendor_crud(client, admin_headers):
    response = await client.post("/vendors", headers=admin_headers, json={
        "email": "Parts@Example.com", "first_name": "Ana", "last_name": "Lee", "phone": "555-0100"
    })
    assert response.status_code == 201
    vendor = response.json()["data"]
    assert vendor["email"] == "parts@example.com"

    response = await client.patch(f"/vendors/{vendor['id']}", headers=admin_headers,
                                  json={"company_name": "Lee Parts"})
    assert response.status_code == 200
    assert response.json()["data"]["company_name"] == "Lee Parts"

    response = await client.delete(f"/vendors/{vendor['id']}", headers=admin_headers)
    assert response.status_code == 200
    response = await client.get(f"/vendors/{vendor['id']}", headers=admin_headers)
    assert response.status_code == 404


async def test_reconcile_counters_endpoint(client, admin_headers, parents, session):
    parents["brand"].product_count = 2
    session.commit()

    response = await client.post("/admin/reconcile-counters", headers=admin_headers)
    assert response.json()["count"] == 1
    assert response.json()["data"][0]["kind"] == "brand"
    assert parents["brand"].product_count == 2

    response = await client.post("/admin/reconcile-counters", headers=admin_headers, params={"fix": "true"})
    assert response.status_code == 200
    session.expire_all()
    assert parents["brand"].product_count == 0
