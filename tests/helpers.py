"""Shared payloads and small helpers for the API tests."""

from hive_api.integrations.stripe_client import PaymentGatewayError

API = "/api"

PROVIDER_PAYLOAD = {
    "name": "Premium Imóveis RJ",
    "email": "agency@example.com",
    "password": "secret123",
    "documentType": "CNPJ",
    "documentNumber": "12.345.678/0001-23",
    "speciality": "Venda e locação de imóveis",
    "description": "Imobiliária com foco em imóveis residenciais no Rio.",
    "location": "Rio de Janeiro, RJ",
    "categories": ["imobiliaria"],
    "phone": "(21) 99999-0000",
    "planType": "B",
}

ELECTRICIAN_OVERRIDES = {
    "name": "João Eletricista",
    "email": "joao@example.com",
    "documentType": "CPF",
    "documentNumber": "123.456.789-01",
    "speciality": "Instalações elétricas",
    "categories": ["eletricista"],
    "planType": "A",
}

PROPERTY_PAYLOAD = {
    "title": "Apartamento Vista Mar",
    "description": "Apartamento amplo com vista para o mar e varanda gourmet.",
    "price": "850000.00",
    "priceType": "sale",
    "propertyType": "apartment",
    "location": "Copacabana, Rio de Janeiro",
    "bedrooms": 3,
    "bathrooms": 2,
    "parkingSpaces": 1,
    "area": 120,
    "imageUrl": "https://images.example.com/apto.jpg",
    "images": ["https://images.example.com/apto-2.jpg"],
    "amenities": ["Piscina", "Academia"],
}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


class FakeGateway:
    """In-memory stand-in for the Stripe client."""

    def __init__(self):
        self.intents = {}
        self.fail = False
        self.created = 0

    async def create_payment_intent(self, *, amount, currency, metadata=None):
        if self.fail:
            raise PaymentGatewayError("create_payment_intent_failed_timeout")
        self.created += 1
        intent_id = f"pi_test_{self.created}"
        self.intents[intent_id] = {
            "id": intent_id,
            "client_secret": f"{intent_id}_secret_abc",
            "amount": amount,
            "currency": currency,
            "status": "requires_payment_method",
            "metadata": dict(metadata or {}),
        }
        return dict(self.intents[intent_id])

    async def retrieve_payment_intent(self, payment_intent_id):
        if self.fail:
            raise PaymentGatewayError("retrieve_payment_intent_failed_timeout")
        if payment_intent_id not in self.intents:
            raise PaymentGatewayError("retrieve_payment_intent_failed", {"_status_code": 404})
        return dict(self.intents[payment_intent_id])

    def succeed(self, payment_intent_id):
        self.intents[payment_intent_id]["status"] = "succeeded"
