"""
Order funnel endpoints — domain search, add-on quotes, durations, payment
settings, invoices, and step-by-step order persistence.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import get_domain_checker, get_functions_client, get_funnel_context
from domain.context import FunnelContext
from domain.responses import StandardErrorResponse, success_response
from models import (
    AddOnQuoteRequest,
    DomainSuggestionState,
    OrderLeadRequest,
    OrderMarketingSaveRequest,
    OrderMarketingSaveResponse,
    SubscriptionAddOnQuoteRequest,
)
from services import (
    addon_catalog,
    invoice_service,
    order_leads,
    order_marketing,
    package_durations,
    payment_settings,
    subscription_addons,
)
from services.domain_suggestions import (
    DomainSuggestionResolver,
    RemoteDomainChecker,
    check_domain_suggestions,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/order", tags=["order"])


def _dump(model) -> Any:
    return model.model_dump(by_alias=True, mode="json")


# ── Domain Suggestions ──────────────────────────────────────────────

@router.get("/domain-suggestions")
async def get_domain_suggestions(
    q: str = Query("", max_length=253),
    checker: RemoteDomainChecker = Depends(get_domain_checker),
    context: FunnelContext = Depends(get_funnel_context),
):
    """One-shot availability check for every candidate of `q` (no debounce)."""
    state = await check_domain_suggestions(checker, q, fallback_error=context.t("domain.check_failed"))
    return success_response(_dump(state))


@router.websocket("/domain-suggestions/ws")
async def domain_suggestions_ws(
    websocket: WebSocket,
    context: FunnelContext = Depends(get_funnel_context),
):
    """
    Live search box. Each text frame is the current input; every settled
    cycle is pushed back as a success envelope. Superseded cycles are never
    sent.
    """
    await websocket.accept()

    async def push(state: DomainSuggestionState) -> None:
        await websocket.send_json(success_response(_dump(state)))

    resolver = DomainSuggestionResolver(
        RemoteDomainChecker(websocket.app.state.functions),
        on_settled=push,
        fallback_error=context.t("domain.check_failed"),
    )
    try:
        while True:
            resolver.update_query(await websocket.receive_text())
    except WebSocketDisconnect:
        logger.debug("Domain suggestion socket closed by client")
    finally:
        resolver.close()


# ── Catalogs ────────────────────────────────────────────────────────

@router.post("/add-ons/quote")
async def quote_add_ons(
    request: AddOnQuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    quote = await addon_catalog.quote_package_add_ons(db, request.package_id, request.quantities)
    return success_response(_dump(quote))


@router.post("/subscription-add-ons/quote")
async def quote_subscription_add_ons(
    request: SubscriptionAddOnQuoteRequest,
    functions=Depends(get_functions_client),
    db: AsyncSession = Depends(get_db),
):
    quote = await subscription_addons.quote_subscription_add_ons(
        functions, db, request.package_id, request.selected
    )
    return success_response(_dump(quote))


@router.get("/packages/{package_id}/durations")
async def list_package_durations(
    package_id: str,
    db: AsyncSession = Depends(get_db),
):
    items = await package_durations.fetch_package_durations(db, package_id)
    return success_response([_dump(i) for i in items])


# ── Payment Settings ────────────────────────────────────────────────

@router.get("/payment-settings/paypal")
async def get_paypal_settings(
    functions=Depends(get_functions_client),
    context: FunnelContext = Depends(get_funnel_context),
):
    result = await payment_settings.resolve_paypal_settings(functions, context.translator)
    return success_response(_dump(result))


@router.get("/payment-settings/midtrans")
async def get_midtrans_settings(
    functions=Depends(get_functions_client),
    context: FunnelContext = Depends(get_funnel_context),
):
    result = await payment_settings.resolve_midtrans_settings(functions, context.translator)
    return success_response(_dump(result))


# ── Invoices ────────────────────────────────────────────────────────

@router.post(
    "/invoices",
    responses={400: {"model": StandardErrorResponse}, 502: {"model": StandardErrorResponse}},
)
async def create_invoice(
    payload: dict[str, Any] = Body(...),
    functions=Depends(get_functions_client),
    context: FunnelContext = Depends(get_funnel_context),
):
    """400 on an invalid payload (nothing sent), 502 when the gateway fails."""
    result = await invoice_service.create_invoice(functions, payload, context.translator)
    return success_response(_dump(result))


# ── Persistence ─────────────────────────────────────────────────────

@router.post("/marketing")
async def save_marketing_step(
    request: OrderMarketingSaveRequest,
    db: AsyncSession = Depends(get_db),
    context: FunnelContext = Depends(get_funnel_context),
):
    order_id = await order_marketing.save_order_marketing(
        db, request.existing_id, request.payload, user_id=context.user_id
    )
    return success_response(_dump(OrderMarketingSaveResponse(id=order_id)))


@router.post("/leads")
async def save_lead(
    request: OrderLeadRequest,
    db: AsyncSession = Depends(get_db),
    context: FunnelContext = Depends(get_funnel_context),
):
    lead_id = await order_leads.save_order_lead(
        db,
        request.state,
        request.flow_type,
        request.amount,
        skip_domain_template=request.skip_domain_template,
        user_id=context.user_id,
    )
    return success_response({"id": lead_id})
