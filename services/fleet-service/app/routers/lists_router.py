"""
Entity list router.

Every collection is served by the same handler shape: the raw query
string goes to the listing service, which validates it against the
collection's allow-list before storage is queried.
"""

from fastapi import APIRouter, Depends, Request

from ..context import RequestContext
from ..dependencies import get_listing_service, get_request_context
from ..query.entity_queries import ENTITY_QUERIES
from ..services.listing_service import ListingService
from .responses import ERROR_RESPONSES

router = APIRouter(prefix="/api/v1", tags=["lists"])


def _list_endpoint(entity: str):
    async def list_entities(
        request: Request,
        service: ListingService = Depends(get_listing_service),
        context: RequestContext = Depends(get_request_context),
    ):
        result = await service.list(entity, request.query_params, context)
        return result.to_dict()

    list_entities.__name__ = f"list_{entity}"
    list_entities.__doc__ = (
        f"Paginated {entity} list. Accepts page, limit, sortBy, sortOrder "
        f"and the filters declared for {entity}."
    )
    return list_entities


for _entity in ENTITY_QUERIES:
    router.add_api_route(
        f"/{_entity}",
        _list_endpoint(_entity),
        methods=["GET"],
        response_model=dict,
        responses={400: ERROR_RESPONSES[400]},
        summary=f"List {_entity}",
    )
