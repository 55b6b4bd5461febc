import anyio

from helpers import API, ELECTRICIAN_OVERRIDES, bearer

BIO = "Atendo residências e pequenos comércios desde 2010."


class TestUpdateProfile:
    def test_updates_and_refreshes_session(self, client, register_viewer):
        token, _ = register_viewer()
        r = client.put(
            f"{API}/profile",
            json={"name": "Ana Souza", "city": "Niterói", "phoneNumber": "(21) 98888-7777"},
            headers=bearer(token),
        )
        assert r.status_code == 200
        user = r.json()["user"]
        assert user["name"] == "Ana Souza"
        assert user["city"] == "Niterói"
        assert client.get(f"{API}/profile", headers=bearer(token)).json()["name"] == "Ana Souza"

    def test_blank_values_are_ignored(self, client, register_viewer):
        token, _ = register_viewer()
        r = client.put(f"{API}/profile", json={"city": "   "}, headers=bearer(token))
        assert r.json()["user"]["city"] is None

    def test_email_conflict(self, client, register_viewer):
        register_viewer(email="taken@example.com")
        token, _ = register_viewer(email="mine@example.com")
        r = client.put(f"{API}/profile", json={"email": "taken@example.com"}, headers=bearer(token))
        assert r.status_code == 409

    def test_changing_document_resets_verification(self, client, storage, register_provider):
        token, user = register_provider(**ELECTRICIAN_OVERRIDES)
        stored = anyio.run(storage.get_user, user["id"])
        stored.documents_verified = True
        anyio.run(storage.save_user, stored)

        r = client.put(f"{API}/profile", json={"documentNumber": "111.222.333-44"}, headers=bearer(token))
        assert r.status_code == 200
        assert r.json()["user"]["documentNumber"] == "11122233344"
        assert r.json()["user"]["documentsVerified"] is False

    def test_invalid_document_length(self, client, register_provider):
        token, _ = register_provider(**ELECTRICIAN_OVERRIDES)
        r = client.put(f"{API}/profile", json={"documentNumber": "123"}, headers=bearer(token))
        assert r.status_code == 422
        assert r.json()["errors"][0]["field"] == "documentNumber"


class TestProviderProfile:
    def test_sets_category_subcategories_and_bio(self, client, register_provider):
        token, _ = register_provider(**ELECTRICIAN_OVERRIDES)
        r = client.put(
            f"{API}/provider/profile",
            json={
                "categoryId": "eletricista",
                "subcategories": ["Iluminação", "Tomadas e Interruptores"],
                "biography": BIO,
                "portfolioImages": ["https://img.example.com/obra.jpg"],
            },
            headers=bearer(token),
        )
        assert r.status_code == 200, r.text
        user = r.json()["user"]
        assert user["categories"] == ["eletricista"]
        assert user["subcategories"] == ["Iluminação", "Tomadas e Interruptores"]
        assert user["description"] == BIO
        assert user["portfolioImages"] == ["https://img.example.com/obra.jpg"]

    def test_more_than_three_subcategories(self, client, register_provider):
        token, _ = register_provider(**ELECTRICIAN_OVERRIDES)
        r = client.put(
            f"{API}/provider/profile",
            json={
                "categoryId": "eletricista",
                "subcategories": [
                    "Instalação Residencial", "Manutenção Industrial", "Iluminação", "Tomadas e Interruptores",
                ],
                "biography": BIO,
            },
            headers=bearer(token),
        )
        assert r.status_code == 409
        assert r.json() == {
            "success": False,
            "kind": "PolicyViolation",
            "message": "Selecione no máximo 3 subcategorias",
        }

    def test_plan_a_cannot_pick_real_estate(self, client, register_provider):
        token, _ = register_provider(**ELECTRICIAN_OVERRIDES)
        r = client.put(
            f"{API}/provider/profile",
            json={"categoryId": "imobiliaria", "subcategories": ["Imóveis Residenciais"], "biography": BIO},
            headers=bearer(token),
        )
        assert r.status_code == 409
        assert r.json()["kind"] == "PolicyViolation"

    def test_unknown_subcategory(self, client, register_provider):
        token, _ = register_provider(**ELECTRICIAN_OVERRIDES)
        r = client.put(
            f"{API}/provider/profile",
            json={"categoryId": "eletricista", "subcategories": ["Encanamento"], "biography": BIO},
            headers=bearer(token),
        )
        assert r.status_code == 422

    def test_short_biography(self, client, register_provider):
        token, _ = register_provider(**ELECTRICIAN_OVERRIDES)
        r = client.put(
            f"{API}/provider/profile",
            json={"categoryId": "eletricista", "subcategories": ["Iluminação"], "biography": "curta"},
            headers=bearer(token),
        )
        assert r.status_code == 422
        assert r.json()["errors"][0]["field"] == "biography"
