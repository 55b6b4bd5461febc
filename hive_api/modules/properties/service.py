# hive_api/modules/properties/service.py
from __future__ import annotations

import logging

from hive_api.core.errors import Forbidden, NotFound
from hive_api.modules.properties.entities import Property
from hive_api.modules.properties.schemas import PropertyCreate
from hive_api.modules.users.entities import Provider
from hive_api.storage.base import Storage

logger = logging.getLogger(__name__)


async def create_property_as_provider(storage: Storage, provider: Provider, data: PropertyCreate) -> Property:
    """Cria um imóvel; o gate de imobiliária com plano ativo já rodou antes."""
    if not (provider.is_real_estate and provider.has_active_plan):
        raise Forbidden("Apenas imobiliárias com plano ativo podem cadastrar imóveis")

    prop = Property(
        title=data.title.strip(),
        description=data.description.strip(),
        price=data.price,
        price_type=data.price_type,
        property_type=data.property_type,
        location=data.location.strip(),
        bedrooms=data.bedrooms,
        bathrooms=data.bathrooms,
        parking_spaces=data.parking_spaces,
        area=data.area,
        image_url=str(data.image_url),
        images=[str(u) for u in data.images],
        amenities=list(dict.fromkeys(data.amenities)),
        agency_name=provider.name,
        agency_id=provider.id,
        agency_logo=provider.profile_image_url,
        status="available",
        featured=False,
        views=0,
        created_by=provider.id,
    )
    prop = await storage.add_property(prop)
    logger.info("Imóvel %s criado por %s", prop.id, provider.id)
    return prop


async def register_view(storage: Storage, property_id: str) -> int:
    views = await storage.increment_property_views(property_id)
    if views is None:
        raise NotFound("Imóvel não encontrado")
    return views


async def get_property_or_404(storage: Storage, property_id: str) -> Property:
    prop = await storage.get_property(property_id)
    if prop is None:
        raise NotFound("Imóvel não encontrado")
    return prop
