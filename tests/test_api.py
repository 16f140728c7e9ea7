async def create_product(client, **overrides):
    body = {"nome": "Espeto de Carne", "preco_unitario": 12.5, "id_categoria": 1, "disponivel": True}
    body.update(overrides)
    return await client.post("/api/produtos", json=body)


async def test_status_and_health(client):
    status = await client.get("/api/status")
    health = await client.get("/health")

    assert status.status_code == 200
    assert status.json()["status"] == "online"
    assert health.json()["database"] == "healthy"


async def test_product_lifecycle(client):
    created = await create_product(client)
    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    product_id = body["data"]["product_id"]

    fetched = (await client.get(f"/api/produtos/{product_id}")).json()
    assert fetched["category_name"] == "ESPETOS"
    assert fetched["stock_id"] == body["data"]["stock_id"]

    updated = await client.put(
        f"/api/produtos/{product_id}",
        json={"preco_unitario": 15.0, "descricao": "desc", "id_categoria": 2, "disponivel": False},
    )
    assert updated.status_code == 200
    fetched = (await client.get(f"/api/produtos/{product_id}")).json()
    assert fetched["unit_price"] == 15.0
    assert fetched["category_name"] == "BEBIDAS"

    assert (await client.delete(f"/api/produtos/{product_id}")).status_code == 200
    again = await client.delete(f"/api/produtos/{product_id}")
    assert again.status_code == 404
    assert again.json()["success"] is False


async def test_invalid_product_is_400_with_messages(client):
    response = await create_product(client, nome="X", preco_unitario=0, id_categoria=7)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Dados inválidos"
    assert len(body["detail"]) == 3


async def test_malformed_body_is_400(client):
    response = await client.post("/api/produtos", json={"nome": "Espeto", "preco_unitario": "abc"})

    assert response.status_code == 400
    assert response.json()["error"] == "Dados inválidos"


async def test_english_field_names_are_accepted(client):
    response = await client.post(
        "/api/produtos",
        json={"name": "Guaraná", "unit_price": "6.00", "category_id": 2},
    )

    assert response.status_code == 201


async def test_order_flow_and_statistics(client):
    product_id = (await create_product(client)).json()["data"]["product_id"]

    created = await client.post(
        "/api/pedidos",
        json={
            "cliente": "Ana",
            "telefone": "5561999999999",
            "itens": [{"id_produto": product_id, "quantidade": 2, "preco_unitario": 12.5}],
            "valor_total": 25.0,
        },
    )
    assert created.status_code == 201
    order = created.json()["data"]
    assert order["status"] == "PENDING"
    assert order["items"][0]["quantity"] == 2

    pending = (await client.get("/api/pedidos/pendentes")).json()
    assert [o["id"] for o in pending] == [order["id"]]

    for path in ("/api/pedidos/estatisticas", "/api/estatisticas"):
        stats = (await client.get(path)).json()
        assert stats["order_count"] == 1
        assert stats["revenue"] == 25.0

    moved = await client.put(f"/api/pedidos/{order['id']}/status", json={"status": "PREPARING"})
    assert moved.status_code == 200
    assert (await client.get("/api/pedidos/pendentes")).json() == []

    history = (await client.get(f"/api/clientes/{order['customer_id']}/pedidos")).json()
    assert history[0]["item_count"] == 1


async def test_order_with_unknown_product_is_rolled_back(client):
    response = await client.post(
        "/api/pedidos",
        json={
            "cliente": "Ana",
            "telefone": "5561999999999",
            "itens": [{"id_produto": 4242, "quantidade": 1, "preco_unitario": 5}],
            "valor_total": 5,
        },
    )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert (await client.get("/api/pedidos")).json() == []


async def test_invalid_status_and_unknown_order(client):
    bad = await client.put("/api/pedidos/1/status", json={"status": "SHIPPED"})
    missing = await client.put("/api/pedidos/1/status", json={"status": "READY"})

    assert bad.status_code == 400
    assert missing.status_code == 404


async def test_categories(client):
    categories = (await client.get("/api/categorias")).json()

    assert [c["name"] for c in categories] == ["ESPETOS", "BEBIDAS", "INSUMOS"]
    assert (await client.get("/api/categorias/9")).status_code == 404


async def test_stock_in_use_cannot_be_deleted(client):
    stock_id = (await create_product(client)).json()["data"]["stock_id"]

    response = await client.delete(f"/api/estoques/{stock_id}")

    assert response.status_code == 400
