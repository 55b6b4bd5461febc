# hive_api/api/v1/router.py
from fastapi import APIRouter
from hive_api.modules.auth.router import router as auth_router
from hive_api.modules.users.router import router as users_router
from hive_api.modules.onboarding.router import router as onboarding_router
from hive_api.modules.properties.router import router as properties_router
from hive_api.modules.catalog.router import router as catalog_router
from hive_api.modules.subscriptions.router import router as subscriptions_router
from hive_api.modules.chat.router import router as chat_router
from hive_api.modules.notifications.router import router as notifications_router

api_router = APIRouter()

api_router.include_router(auth_router,          prefix="/auth",          tags=["auth"])
api_router.include_router(onboarding_router,                             tags=["onboarding"])
api_router.include_router(users_router,                                  tags=["users"])
api_router.include_router(properties_router,    prefix="/properties",    tags=["properties"])
api_router.include_router(catalog_router,                                tags=["catalog"])
api_router.include_router(subscriptions_router,                          tags=["subscriptions"])
api_router.include_router(chat_router,          prefix="/chat",          tags=["chat"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["notifications"])
