"""Coin collection endpoints."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from core.dal.models import CoinEntry
from numisroma.views.common import actor_id, current_user, parse_body
from numisroma.views.schemas import AddCoinRequest, CoinMeasurements, CreateCollectionRequest, UpdateCollectionRequest

if TYPE_CHECKING:
    from starlette.requests import Request

    from core.collections.service import CollectionService
    from core.dal.models import Collection


def _service(request: Request) -> CollectionService:
    return request.app.state.collection_service


def _listing(collections: list[Collection]) -> JSONResponse:
    return JSONResponse([collection.to_wire() for collection in collections])


async def create_collection(request: Request) -> JSONResponse:
    body = await parse_body(request, CreateCollectionRequest)
    collection = await _service(request).create(
        current_user(request).user_id,
        body.name,
        description=body.description,
        image=body.image,
        is_public=body.is_public,
    )
    return JSONResponse(collection.to_wire(), status_code=HTTPStatus.CREATED)


async def list_my_collections(request: Request) -> JSONResponse:
    return _listing(await _service(request).list_mine(current_user(request).user_id))


async def list_public_collections(request: Request) -> JSONResponse:
    return _listing(await _service(request).list_public())


async def list_user_collections(request: Request) -> JSONResponse:
    """GET /api/collections/user/{user_id} - private collections only for their owner."""
    user_id = request.path_params["user_id"]
    return _listing(await _service(request).list_for_user(user_id, actor_id(request)))


async def get_collection(request: Request) -> JSONResponse:
    collection = await _service(request).get(request.path_params["collection_id"], actor_id(request))
    return JSONResponse(collection.to_wire())


async def update_collection(request: Request) -> JSONResponse:
    body = await parse_body(request, UpdateCollectionRequest)
    collection = await _service(request).update(
        request.path_params["collection_id"],
        current_user(request).user_id,
        body.model_dump(exclude_unset=True),
    )
    return JSONResponse(collection.to_wire())


async def delete_collection(request: Request) -> JSONResponse:
    await _service(request).delete(request.path_params["collection_id"], current_user(request).user_id)
    return JSONResponse({"message": "Collection deleted"})


async def add_coin(request: Request) -> JSONResponse:
    body = await parse_body(request, AddCoinRequest)
    collection = await _service(request).add_coin(
        request.path_params["collection_id"],
        current_user(request).user_id,
        CoinEntry(**body.model_dump()),
    )
    return JSONResponse(collection.to_wire())


async def update_coin(request: Request) -> JSONResponse:
    body = await parse_body(request, CoinMeasurements)
    collection = await _service(request).update_coin(
        request.path_params["collection_id"],
        current_user(request).user_id,
        request.path_params["coin_id"],
        body.model_dump(exclude_unset=True),
    )
    return JSONResponse(collection.to_wire())


async def remove_coin(request: Request) -> JSONResponse:
    collection = await _service(request).remove_coin(
        request.path_params["collection_id"],
        current_user(request).user_id,
        request.path_params["coin_id"],
    )
    return JSONResponse(collection.to_wire())
