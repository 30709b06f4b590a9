"""FastAPI dependencies resolving the process-wide components built by create_app."""

from fastapi import Request

from app.core.config import Settings
from app.core.security import TokenService
from app.services.account_store import AccountStore
from app.services.catalog_store import CatalogStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog_store(request: Request) -> CatalogStore:
    return request.app.state.catalog_store


def get_account_store(request: Request) -> AccountStore:
    return request.app.state.account_store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service
