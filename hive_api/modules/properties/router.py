from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hive_api.core.dependencies import AuthContext, get_storage, require_provider, require_real_estate_provider
from hive_api.storage.base import Storage
from . import service
from .schemas import PropertyCreate, PropertyOut, ViewsOut

router = APIRouter()


def _out(items) -> List[PropertyOut]:
    return [PropertyOut.model_validate(p) for p in items]


@router.get("", response_model=List[PropertyOut])
async def list_properties(
    price_type: Optional[str] = Query(default=None, alias="priceType"),
    property_type: Optional[str] = Query(default=None, alias="propertyType"),
    city: Optional[str] = None,
    featured: Optional[bool] = None,
    storage: Storage = Depends(get_storage),
):
    items = await storage.list_properties(
        price_type=price_type, property_type=property_type, city=city, featured=featured
    )
    return _out(items)


@router.post("", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: PropertyCreate,
    ctx: AuthContext = Depends(require_real_estate_provider),
    storage: Storage = Depends(get_storage),
):
    prop = await service.create_property_as_provider(storage, ctx.user, payload)
    return PropertyOut.model_validate(prop)


@router.get("/featured", response_model=List[PropertyOut])
async def featured_properties(storage: Storage = Depends(get_storage)):
    return _out(await storage.list_properties(featured=True))


@router.get("/mine", response_model=List[PropertyOut])
async def my_properties(ctx: AuthContext = Depends(require_provider), storage: Storage = Depends(get_storage)):
    return _out(await storage.list_properties(created_by=ctx.user.id))


@router.get("/{property_id}", response_model=PropertyOut)
async def get_property(property_id: str, storage: Storage = Depends(get_storage)):
    return PropertyOut.model_validate(await service.get_property_or_404(storage, property_id))


@router.post("/{property_id}/view", response_model=ViewsOut)
async def register_view(property_id: str, storage: Storage = Depends(get_storage)):
    views = await service.register_view(storage, property_id)
    return ViewsOut(id=property_id, views=views)
