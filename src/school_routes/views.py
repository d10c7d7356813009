from __future__ import annotations

import json
import logging
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST
from pydantic import BaseModel, ValidationError

from school_routes.exceptions import (
    AddressNotFoundError,
    EmptyGraphError,
    NoRouteFoundError,
    UnknownSchoolError,
)
from school_routes.models import Junction, School, StreetAddress
from school_routes.schemas import RouteRequest, SchoolDistancesRequest
from school_routes.services.planner import RoutePlannerService

logger = logging.getLogger(__name__)

_planner_service: RoutePlannerService | None = None


def get_route_planner() -> RoutePlannerService:
    global _planner_service
    if _planner_service is None:
        _planner_service = RoutePlannerService()
    return _planner_service


@require_GET
def health_view(_: HttpRequest) -> HttpResponse:
    return JsonResponse(
        {
            "status": "ok",
            "dataset": {
                "junctions": Junction.objects.count(),
                "addresses": StreetAddress.objects.count(),
                "schools": School.objects.count(),
            },
        }
    )


@csrf_exempt
@require_POST
def route_view(request: HttpRequest) -> HttpResponse:
    route_request = _validate(request, RouteRequest)
    if isinstance(route_request, JsonResponse):
        return route_request

    try:
        response = get_route_planner().plan_route(route_request)
    except AddressNotFoundError as exc:
        return _error_response("address_not_found", str(exc), status=400)
    except NoRouteFoundError as exc:
        return _error_response("no_route", str(exc), status=422)
    except EmptyGraphError as exc:
        logger.error("Route requested with no street data loaded: %s", exc)
        return _error_response("empty_graph", str(exc), status=503)

    return JsonResponse(response.model_dump(mode="json"), status=200)


@csrf_exempt
@require_POST
def school_distances_view(request: HttpRequest) -> HttpResponse:
    distances_request = _validate(request, SchoolDistancesRequest)
    if isinstance(distances_request, JsonResponse):
        return distances_request

    try:
        response = get_route_planner().school_distances(distances_request)
    except AddressNotFoundError as exc:
        return _error_response("address_not_found", str(exc), status=400)
    except UnknownSchoolError as exc:
        return _error_response("unknown_school", str(exc), status=404)
    except EmptyGraphError as exc:
        logger.error("School distances requested with no street data loaded: %s", exc)
        return _error_response("empty_graph", str(exc), status=503)

    return JsonResponse(response.model_dump(mode="json"), status=200)


def _validate(request: HttpRequest, schema: type[BaseModel]) -> Any:
    payload = _parse_json_payload(request)
    if isinstance(payload, JsonResponse):
        return payload

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        return JsonResponse(
            {
                "error": {
                    "code": "validation_error",
                    "message": "Invalid request payload",
                    "details": exc.errors(include_url=False, include_context=False),
                }
            },
            status=400,
        )


def _parse_json_payload(request: HttpRequest) -> dict[str, Any] | JsonResponse:
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except json.JSONDecodeError:
        return _error_response("invalid_json", "Request body must be valid JSON", status=400)

    if not isinstance(payload, dict):
        return _error_response("invalid_json", "JSON body must be an object", status=400)

    return payload


def _error_response(code: str, message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": {"code": code, "message": message}}, status=status)
