# hive_api/storage/seed.py
"""Dados iniciais: categorias, planos e (opcional) contas/imóveis de demonstração."""
from __future__ import annotations

import logging
from decimal import Decimal

from hive_api.core.config import settings
from hive_api.core.security import hash_password
from hive_api.modules.catalog.entities import Plan, ServiceCategory
from hive_api.modules.properties.entities import Property
from hive_api.modules.users.entities import Provider, Viewer
from hive_api.storage.base import Storage

logger = logging.getLogger(__name__)

# slug, nome, ícone, prestadores, subcategorias
CPF_CATEGORIES = [
    ("encanador", "Encanador", "fas fa-wrench", 156,
     ["Desentupimento", "Instalação Hidráulica", "Vazamentos", "Aquecedores"]),
    ("eletricista", "Eletricista", "fas fa-bolt", 89,
     ["Instalação Residencial", "Manutenção Industrial", "Iluminação", "Tomadas e Interruptores"]),
    ("pintor", "Pintor", "fas fa-paint-roller", 203,
     ["Pintura Residencial", "Pintura Comercial", "Textura", "Verniz e Lacas"]),
    ("pedreiro", "Pedreiro", "fas fa-hard-hat", 67,
     ["Construção", "Reforma", "Acabamentos", "Reparos"]),
    ("marceneiro", "Marceneiro", "fas fa-hammer", 42,
     ["Móveis Planejados", "Móveis Sob Medida", "Reparos", "Restauração"]),
    ("limpeza", "Limpeza", "fas fa-broom", 124,
     ["Limpeza Residencial", "Limpeza Pós-Obra", "Limpeza de Vidros", "Diarista"]),
    ("jardinagem", "Jardinagem", "fas fa-leaf", 95,
     ["Paisagismo", "Manutenção", "Poda", "Irrigação"]),
    ("ar-condicionado", "Ar Condicionado", "fas fa-snowflake", 167,
     ["Instalação", "Manutenção", "Reparo", "Limpeza"]),
    ("dedetizacao", "Dedetização", "fas fa-bug", 76,
     ["Controle de Pragas", "Desinsetização", "Desratização", "Descupinização"]),
    ("seguranca", "Segurança", "fas fa-shield-alt", 73,
     ["Câmeras", "Alarmes", "Cercas Elétricas", "Monitoramento"]),
    ("assistencia-tecnica", "Assistência Técnica", "fas fa-tools", 145,
     ["Eletrodomésticos", "Eletrônicos", "Celulares", "Informática"]),
    ("serralheria", "Serralheria", "fas fa-industry", 89,
     ["Portões", "Grades", "Estruturas Metálicas", "Soldas"]),
    ("mudancas", "Mudanças", "fas fa-truck", 81,
     ["Mudanças Residenciais", "Mudanças Comerciais", "Transporte de Móveis", "Embalagem"]),
]

CNPJ_CATEGORIES = [
    ("imobiliaria", "Imobiliária", "fas fa-building", 245, [
        "Imóveis Residenciais",
        "Imóveis Comerciais",
        "Incorporação e Lançamentos",
        "Locação de Temporada",
        "Administração Predial",
        "Avaliação Imobiliária",
        "Corretagem Especializada",
        "Regularização Imobiliária",
        "Espaços para Eventos",
        "Consultoria Imobiliária",
    ]),
]


def default_plans() -> list[Plan]:
    return [
        Plan(
            type="A",
            name="BE HIVE",
            price=Decimal(settings.PLAN_A_PRICE),
            features=[
                "Perfil profissional completo",
                "Galeria de trabalhos (até 20 fotos)",
                "Sistema de avaliações",
                "Contato direto com clientes",
                "Aparição em buscas",
                "Todas as categorias de serviço",
                "Suporte via WhatsApp",
            ],
            target_audience="CPF",
            popular=False,
        ),
        Plan(
            type="B",
            name="HIVE GOLD",
            price=Decimal(settings.PLAN_B_PRICE),
            features=[
                "Tudo do Plano A, mais:",
                "Perfil de empresa completo",
                "Listagem ilimitada de imóveis",
                "Destaque em buscas",
                "Equipe de profissionais",
                "Galeria ilimitada de fotos",
                "Relatórios e analytics",
                "Suporte prioritário",
            ],
            target_audience="CNPJ",
            popular=True,
        ),
    ]


async def seed_catalog(storage: Storage) -> int:
    """Idempotente: só insere o que ainda não existe."""
    created = 0
    for audience, rows in (("CPF", CPF_CATEGORIES), ("CNPJ", CNPJ_CATEGORIES)):
        for slug, name, icon, count, subcategories in rows:
            if await storage.get_category(slug) is None:
                await storage.save_category(ServiceCategory(
                    slug=slug, name=name, icon=icon, audience=audience,
                    provider_count=count, subcategories=subcategories,
                ))
                created += 1
    for plan in default_plans():
        if await storage.get_plan(plan.type) is None:
            await storage.save_plan(plan)
            created += 1
    if created:
        logger.info("Catálogo semeado (%s registros)", created)
    return created


DEMO_PASSWORD = "123456"


def _demo_users() -> list:
    pw = hash_password(DEMO_PASSWORD)
    return [
        Viewer(email="admin@hive.com", password_hash=pw, name="Admin Teste"),
        Viewer(email="viewer@test.com", password_hash=pw, name="João Silva"),
        Provider(
            email="eletricista@test.com", password_hash=pw, name="Carlos Elétrico",
            phone_number="11987654321", city="São Paulo", state="SP",
            document_type="CPF", document_number="12345678901",
            speciality="Instalações elétricas residenciais",
            description="Eletricista com mais de 10 anos de experiência em reparos e instalações.",
            location="São Paulo, SP", categories=["eletricista"],
            plan_type="A", plan_status="active",
        ),
        Provider(
            email="imobiliaria@test.com", password_hash=pw, name="Premium Imóveis RJ",
            phone_number="21934567890", city="Rio de Janeiro", state="RJ",
            document_type="CNPJ", document_number="12345678000123",
            speciality="Venda e locação de imóveis",
            description="Imobiliária especializada em imóveis residenciais e comerciais no Rio.",
            location="Rio de Janeiro, RJ", categories=["imobiliaria"],
            plan_type="B", plan_status="active",
        ),
    ]


def _demo_properties(agency: Provider) -> list[Property]:
    common = dict(agency_name=agency.name, agency_id=agency.id, created_by=agency.id, featured=True)
    return [
        Property(
            title="Apartamento Luxury Vista Mar",
            description="Apartamento moderno com vista para o mar, totalmente mobiliado com acabamentos de luxo.",
            price=Decimal("850000.00"), price_type="sale", property_type="apartment",
            location="Copacabana, Rio de Janeiro", bedrooms=3, bathrooms=2, parking_spaces=2, area=120,
            image_url="https://images.unsplash.com/photo-1545324418-cc1a3fa10c00",
            amenities=["Piscina", "Academia", "Varanda", "Ar condicionado"],
            **common,
        ),
        Property(
            title="Casa Condomínio Fechado",
            description="Casa espaçosa em condomínio fechado com área de lazer completa.",
            price=Decimal("3500.00"), price_type="rent", property_type="house",
            location="Barra da Tijuca, Rio de Janeiro", bedrooms=4, bathrooms=3, parking_spaces=4, area=200,
            image_url="https://images.unsplash.com/photo-1580587771525-78b9dba3b914",
            amenities=["Jardim", "Churrasqueira", "Piscina", "Segurança 24h"],
            **common,
        ),
        Property(
            title="Salão de Festas Premium",
            description="Salão elegante para eventos com capacidade para 200 pessoas.",
            price=Decimal("1200.00"), price_type="event", property_type="event_hall",
            location="Ipanema, Rio de Janeiro", bathrooms=4, parking_spaces=50, area=300,
            image_url="https://images.unsplash.com/photo-1519167758481-83f550bb49b3",
            amenities=["Cozinha", "Som profissional", "Iluminação", "Decoração"],
            **common,
        ),
        Property(
            title="Sala Comercial Centro",
            description="Sala comercial moderna no centro da cidade com excelente localização.",
            price=Decimal("2800.00"), price_type="rent", property_type="commercial",
            location="Centro, Rio de Janeiro", bathrooms=2, parking_spaces=2, area=120,
            image_url="https://images.unsplash.com/photo-1497366216548-37526070297c",
            amenities=["Fibra óptica", "Ar condicionado", "Elevador", "Segurança"],
            **common,
        ),
    ]


async def seed_demo_data(storage: Storage) -> None:
    agency = None
    for user in _demo_users():
        existing = await storage.get_user_by_email(user.email)
        if existing is None:
            existing = await storage.add_user(user)
        if isinstance(existing, Provider) and existing.is_real_estate:
            agency = existing
    if agency is not None and await storage.count_properties_by_owner(agency.id) == 0:
        for prop in _demo_properties(agency):
            await storage.add_property(prop)
    logger.info("Dados de demonstração prontos")
