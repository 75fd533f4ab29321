# tests/test_routes/test_migration_routes.py
import pytest


@pytest.fixture
def launch(mocker):
    return mocker.patch("app.routes.migrations.launch_migration")


def test_create_migration_queues_background_run(api, mock_storage, launch):
    mock_storage.add_product(id=1, external_id="1001", name="Phone")
    mock_storage.add_product(id=2, external_id="1002", name="Case")

    response = api.post("/api/migrations", json={"product_ids": [1, 2, 1], "options": {"update_prices": True}})

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["total_products"] == 2
    assert body["direction"] == "to_target"
    assert body["options"]["update_prices"] is True

    migration = mock_storage.migrations[body["id"]]
    assert migration.product_ids == [1, 2]
    launch.assert_called_once()
    args = launch.call_args.args
    assert args[0] == body["id"]
    assert args[1] == [1, 2]
    assert args[2].value == "to_target"


def test_create_migration_requires_products(api, mock_storage, launch):
    response = api.post("/api/migrations", json={"product_ids": []})

    assert response.status_code == 400
    assert mock_storage.migrations == {}
    launch.assert_not_called()


def test_list_and_recent_migrations(api, mock_storage):
    for _ in range(3):
        mock_storage.add_migration([1])

    all_migrations = api.get("/api/migrations").json()
    recent = api.get("/api/migrations/recent", params={"limit": 2}).json()

    assert [m["id"] for m in all_migrations] == [3, 2, 1]
    assert [m["id"] for m in recent] == [3, 2]
    assert api.get("/api/migrations/recent", params={"limit": 0}).status_code == 422


def test_migration_detail_includes_products(api, mock_storage):
    mock_storage.add_product(id=1, external_id="1001", name="Phone", category_path="Electronics/Phones")
    mock_storage.add_category_mapping("Electronics/Phones", "Смартфоны")

    migration_id = api.post("/api/migrate/to-target", json={"product_ids": [1, 99]}).json()["migration_id"]
    response = api.get(f"/api/migrations/{migration_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "partial"
    assert body["successful_products"] == 1
    assert body["failed_products"] == 1
    rows = {row["product_id"]: row for row in body["products"]}
    assert rows[1]["status"] == "success"
    assert rows[1]["product"]["name"] == "Phone"
    assert rows[99]["status"] == "failed"
    assert rows[99]["product"] is None


def test_migration_detail_not_found(api):
    assert api.get("/api/migrations/404").status_code == 404


def test_migrate_to_target_inline(api, mock_storage, wildberries_client):
    mock_storage.add_product(id=1, external_id="1001", name="Phone", category_path="Phones", price=1000)
    mock_storage.add_category_mapping("Phones", "Смартфоны", target_subject_id=515)

    response = api.post("/api/migrate/to-target", json={"product_ids": [1]})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["successful"] == 1
    assert body["details"][0]["target_product_id"] == "WB-1"
    assert wildberries_client.created[0].subject_id == 515
    assert mock_storage.migrations[body["migration_id"]].status == "completed"


def test_migrate_to_source_inline(api, mock_storage, ozon_client):
    mock_storage.add_product(
        id=5, external_id="555", marketplace_id="wildberries", name="Kettle", category_path="Чайники"
    )

    response = api.post("/api/migrate/to-source", json={"product_ids": [5]})

    assert response.status_code == 200
    body = response.json()
    assert body["successful"] == 1
    assert body["details"][0]["target_product_id"] == "OZ-1"
    assert ozon_client.created[0].offer_id == "WB-555"


def test_migrate_inline_requires_products(api):
    assert api.post("/api/migrate/to-target", json={"product_ids": []}).status_code == 400
