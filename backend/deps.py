"""
Shared FastAPI dependencies.

Centralized so routers import from a single place: the remote
functions client, the domain checker and the per-request funnel context.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from config import settings
from domain.context import FunnelContext
from middleware.auth import optional_session_user
from services.domain_suggestions import RemoteDomainChecker
from services.functions_client import RemoteFunctionsClient


def get_functions_client(request: Request) -> RemoteFunctionsClient:
    """The app-wide client created in the lifespan."""
    return request.app.state.functions


def get_domain_checker(
    functions: RemoteFunctionsClient = Depends(get_functions_client),
) -> RemoteDomainChecker:
    return RemoteDomainChecker(functions)


async def get_funnel_context(
    accept_language: Optional[str] = Header(None, alias="Accept-Language"),
    user_id: Optional[str] = Depends(optional_session_user),
) -> FunnelContext:
    """Language from Accept-Language (default from settings), user from the bearer token."""
    return FunnelContext(language=accept_language or settings.default_language, user_id=user_id)
