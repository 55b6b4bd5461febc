from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import anyio
import pytest

from hive_api.modules.properties.entities import Property

from helpers import API, PROPERTY_PAYLOAD, bearer


@pytest.fixture
def agency(client, register_provider, pay_plan):
    """Imobiliária plano B com pagamento confirmado."""
    token, user = register_provider()
    pay_plan(token, "B")
    return token, user


class TestCreateProperty:
    def test_agency_can_list_after_paying(self, client, register_provider, pay_plan):
        token, user = register_provider()
        r = client.post(f"{API}/properties", json=PROPERTY_PAYLOAD, headers=bearer(token))
        assert r.status_code == 403

        pay_plan(token, "B")
        me = client.get(f"{API}/auth/me", headers=bearer(token)).json()["user"]
        assert me["planStatus"] == "active"

        r = client.post(f"{API}/properties", json=PROPERTY_PAYLOAD, headers=bearer(token))
        assert r.status_code == 201, r.text
        prop = r.json()
        assert prop["views"] == 0
        assert prop["status"] == "available"
        assert prop["featured"] is False
        assert prop["agencyName"] == "Premium Imóveis RJ"
        assert prop["agencyId"] == user["id"]
        assert prop["createdBy"] == user["id"]
        assert prop["price"] == "850000.00"
        assert prop["imageUrl"] == "https://images.example.com/apto.jpg"

    def test_validation_lists_all_missing_fields(self, client, agency):
        token, _ = agency
        r = client.post(f"{API}/properties", json={}, headers=bearer(token))
        assert r.status_code == 422
        fields = {e["field"] for e in r.json()["errors"]}
        assert fields == {
            "title", "description", "price", "priceType", "propertyType",
            "location", "bathrooms", "area", "imageUrl",
        }

    @pytest.mark.parametrize(
        "change,field",
        [
            ({"price": "0"}, "price"),
            ({"priceType": "swap"}, "priceType"),
            ({"propertyType": "castle"}, "propertyType"),
            ({"bathrooms": 0}, "bathrooms"),
            ({"title": "Apt"}, "title"),
            ({"imageUrl": "not a url"}, "imageUrl"),
        ],
    )
    def test_invalid_field(self, client, agency, change, field):
        token, _ = agency
        r = client.post(f"{API}/properties", json={**PROPERTY_PAYLOAD, **change}, headers=bearer(token))
        assert r.status_code == 422
        assert field in {e["field"] for e in r.json()["errors"]}

    def test_mine_lists_own_properties(self, client, agency):
        token, user = agency
        client.post(f"{API}/properties", json=PROPERTY_PAYLOAD, headers=bearer(token))
        r = client.get(f"{API}/properties/mine", headers=bearer(token))
        assert r.status_code == 200
        assert [p["createdBy"] for p in r.json()] == [user["id"]]


class TestBrowseProperties:
    def test_public_listing_and_filters(self, client, agency):
        token, _ = agency
        client.post(f"{API}/properties", json=PROPERTY_PAYLOAD, headers=bearer(token))
        rent = {**PROPERTY_PAYLOAD, "title": "Casa para alugar", "priceType": "rent", "propertyType": "house",
                "location": "Niterói, Rio de Janeiro"}
        client.post(f"{API}/properties", json=rent, headers=bearer(token))

        assert len(client.get(f"{API}/properties").json()) == 2
        sale = client.get(f"{API}/properties", params={"priceType": "sale"}).json()
        assert [p["title"] for p in sale] == ["Apartamento Vista Mar"]
        houses = client.get(f"{API}/properties", params={"propertyType": "house"}).json()
        assert [p["title"] for p in houses] == ["Casa para alugar"]
        niteroi = client.get(f"{API}/properties", params={"city": "niterói"}).json()
        assert len(niteroi) == 1
        assert client.get(f"{API}/properties/featured").json() == []

    def test_get_unknown_property(self, client):
        r = client.get(f"{API}/properties/does-not-exist")
        assert r.status_code == 404
        assert r.json()["kind"] == "NotFound"

    def test_register_view(self, client, agency):
        token, _ = agency
        prop = client.post(f"{API}/properties", json=PROPERTY_PAYLOAD, headers=bearer(token)).json()
        r = client.post(f"{API}/properties/{prop['id']}/view")
        assert r.json() == {"id": prop["id"], "views": 1}
        client.post(f"{API}/properties/{prop['id']}/view")
        assert client.get(f"{API}/properties/{prop['id']}").json()["views"] == 2

    def test_view_unknown_property(self, client):
        assert client.post(f"{API}/properties/nope/view").status_code == 404


class TestConcurrentViews:
    def test_threads_do_not_lose_increments(self, storage):
        prop = Property(
            title="Sala comercial",
            description="Sala comercial no centro da cidade.",
            price=Decimal("1500"),
            price_type="rent",
            property_type="commercial",
            location="Centro, Rio de Janeiro",
            bathrooms=1,
            area=40,
            image_url="https://images.example.com/sala.jpg",
            agency_name="Agência",
            agency_id="agency-1",
        )
        anyio.run(storage.add_property, prop)

        def bump(_):
            return anyio.run(storage.increment_property_views, prop.id)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(bump, range(200)))

        assert sorted(results) == list(range(1, 201))
        assert anyio.run(storage.get_property, prop.id).views == 200
