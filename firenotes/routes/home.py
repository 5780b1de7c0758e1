"""
Firenotes — Home Screen Routes
===============================

What:  Reads and mutations of the signed-in client's notes and products.
Why:   The Home screen renders from its controller's state cells; these
       handlers turn HTTP calls into controller intents and answer with the
       refreshed snapshot.
How:   The caller's ClientContext is injected by get_client_context. Every
       mutation waits for its refresh, so the response already reflects the
       store. Store failures do not raise: they come back as a notification
       and in last_error, with the previous list still shown.

Routes:
    GET    /home                    snapshot (optional product_sort)
    POST   /home/reload             load_data(), both collections
    POST   /home/notes              add note
    PUT    /home/notes/{id}         replace title + content
    DELETE /home/notes/{id}         delete note
    POST   /home/products           add product
    PUT    /home/products/{id}      replace name + price
    DELETE /home/products/{id}      delete product
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from firenotes.deps import get_client_context
from firenotes.results import StoreResult
from firenotes.schemas.auth import NavigationState, UserResponse
from firenotes.schemas.common import ErrorResponse
from firenotes.schemas.home import HomeStateResponse, NoteRequest, ProductRequest
from firenotes.services.sessions import ClientContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/home", tags=["Home"])

_ERROR_RESPONSES = {
    401: {"description": "No live client session", "model": ErrorResponse},
}


def _snapshot(
    context: ClientContext,
    notification: Optional[str] = None,
    product_sort: Optional[str] = None,
) -> HomeStateResponse:
    controller = context.controller
    if product_sort:
        products = controller.products_by_price(descending=product_sort == "price_desc")
    else:
        products = controller.products.value
    profile = context.identity.get_current_user()
    return HomeStateResponse(
        user=UserResponse.from_profile(profile) if profile else None,
        notes=controller.notes.value,
        products=products,
        notes_version=controller.notes.version,
        products_version=controller.products.version,
        notification=notification,
        last_error=controller.last_error.value,
        navigation=NavigationState.from_navigator(context.navigator),
    )


def _notify(result: StoreResult, success: str, failure: str) -> str:
    if result.ok:
        return success
    return f"{failure}: {result.message}"


@router.get(
    "",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Current Home state",
)
async def get_home(
    product_sort: Optional[str] = Query(
        default=None,
        pattern="^price_(asc|desc)$",
        description="Order products by price: 'price_asc' or 'price_desc'",
    ),
    context: ClientContext = Depends(get_client_context),
) -> HomeStateResponse:
    return _snapshot(context, product_sort=product_sort)


@router.post(
    "/reload",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Re-fetch notes and products",
)
async def reload(context: ClientContext = Depends(get_client_context)) -> HomeStateResponse:
    await context.controller.load_data()
    return _snapshot(context)


# ── Notes ─────────────────────────────────────────────────────────────────

@router.post(
    "/notes",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Add a note",
)
async def add_note(
    body: NoteRequest,
    context: ClientContext = Depends(get_client_context),
) -> HomeStateResponse:
    result = await context.controller.add_note(body.title, body.content)
    return _snapshot(context, _notify(result, "Note added", "Could not add note"))


@router.put(
    "/notes/{note_id}",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Replace a note's title and content",
)
async def edit_note(
    note_id: str,
    body: NoteRequest,
    context: ClientContext = Depends(get_client_context),
) -> HomeStateResponse:
    result = await context.controller.edit_note(note_id, body.title, body.content)
    return _snapshot(context, _notify(result, "Note updated", "Could not update note"))


@router.delete(
    "/notes/{note_id}",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    context: ClientContext = Depends(get_client_context),
) -> HomeStateResponse:
    result = await context.controller.delete_note(note_id)
    return _snapshot(context, _notify(result, "Note deleted", "Could not delete note"))


# ── Products ──────────────────────────────────────────────────────────────

@router.post(
    "/products",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Add a product",
)
async def add_product(
    body: ProductRequest,
    context: ClientContext = Depends(get_client_context),
) -> HomeStateResponse:
    result = await context.controller.add_product(body.name, body.price)
    return _snapshot(context, _notify(result, "Product added", "Could not add product"))


@router.put(
    "/products/{product_id}",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Replace a product's name and price",
)
async def edit_product(
    product_id: str,
    body: ProductRequest,
    context: ClientContext = Depends(get_client_context),
) -> HomeStateResponse:
    result = await context.controller.edit_product(product_id, body.name, body.price)
    return _snapshot(context, _notify(result, "Product updated", "Could not update product"))


@router.delete(
    "/products/{product_id}",
    response_model=HomeStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    context: ClientContext = Depends(get_client_context),
) -> HomeStateResponse:
    result = await context.controller.delete_product(product_id)
    return _snapshot(context, _notify(result, "Product deleted", "Could not delete product"))
