from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from hive_api.core.dependencies import get_storage
from hive_api.core.errors import NotFound
from hive_api.modules.users.service import get_public_provider
from hive_api.storage.base import Storage
from .schemas import CategoryOut, PlanOut, ServiceProviderOut

router = APIRouter()


@router.get("/service-categories", response_model=List[CategoryOut])
async def list_categories(audience: Optional[str] = None, storage: Storage = Depends(get_storage)):
    return [CategoryOut.model_validate(c) for c in await storage.list_categories(audience=audience)]


@router.get("/service-categories/{slug}", response_model=CategoryOut)
async def get_category(slug: str, storage: Storage = Depends(get_storage)):
    category = await storage.get_category(slug)
    if category is None:
        raise NotFound("Categoria não encontrada")
    return CategoryOut.model_validate(category)


@router.get("/plans", response_model=List[PlanOut])
async def list_plans(storage: Storage = Depends(get_storage)):
    return [PlanOut.model_validate(p) for p in await storage.list_plans()]


@router.get("/service-providers", response_model=List[ServiceProviderOut])
async def list_service_providers(
    category: Optional[str] = None,
    document_type: Optional[str] = Query(default=None, alias="documentType"),
    city: Optional[str] = None,
    storage: Storage = Depends(get_storage),
):
    providers = await storage.list_providers(category=category, document_type=document_type, city=city)
    return [ServiceProviderOut.model_validate(p) for p in providers]


@router.get("/service-providers/{provider_id}", response_model=ServiceProviderOut)
async def get_service_provider(provider_id: str, storage: Storage = Depends(get_storage)):
    provider = await get_public_provider(storage, provider_id)
    if provider is None:
        raise NotFound("Prestador não encontrado")
    return ServiceProviderOut.model_validate(provider)
