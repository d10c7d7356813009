from __future__ import annotations

import json

import pytest

from school_routes.exceptions import (
    AddressNotFoundError,
    EmptyGraphError,
    NoRouteFoundError,
    UnknownSchoolError,
)
from school_routes.models import Junction, School, StreetAddress
from school_routes.schemas import (
    Coordinate,
    JunctionResponse,
    RouteResponse,
    RouteSummaryResponse,
)
from school_routes.services.planner import RoutePlannerService


def _post(api_client, path: str, payload: object):
    return api_client.post(path, data=json.dumps(payload), content_type="application/json")


@pytest.mark.django_db
def test_health_endpoint_returns_dataset_counts(api_client) -> None:
    Junction.objects.create(cnn=1, latitude=37.76, longitude=-122.43, streets=["MAIN ST"])
    StreetAddress.objects.create(number="100", street="MAIN ST", latitude=37.76, longitude=-122.43)
    School.objects.create(name="Lowell", types=["High"], address="1101 Eucalyptus Dr")

    response = api_client.get("/api/v1/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["dataset"] == {"junctions": 1, "addresses": 1, "schools": 1}


def test_route_validation_error_returns_400(api_client) -> None:
    response = _post(api_client, "/api/v1/route", {"start_address": "100 Main St"})

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"]["code"] == "validation_error"
    assert payload["error"]["details"][0]["loc"] == ["end_address"]


def test_route_rejects_unexpected_fields(api_client) -> None:
    response = _post(
        api_client,
        "/api/v1/route",
        {"start_address": "100 Main St", "end_address": "300 Oak St", "mode": "car"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


@pytest.mark.parametrize("body", ["not json", "[1, 2]"])
def test_route_invalid_json_returns_400(api_client, body: str) -> None:
    response = api_client.post("/api/v1/route", data=body, content_type="application/json")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_json"


def test_route_requires_post(api_client) -> None:
    assert api_client.get("/api/v1/route").status_code == 405


def test_route_success_uses_planner_response(api_client, mocker) -> None:
    fake_response = RouteResponse(
        start_address="100 MAIN ST",
        end_address="300 OAK ST",
        start=Coordinate(latitude=37.76, longitude=-122.4299),
        end=Coordinate(latitude=37.761, longitude=-122.4288),
        junctions=[
            JunctionResponse(cnn=1, name="Elm St & Main St", latitude=37.76, longitude=-122.43),
        ],
        directions=["Go E on Main St 364 ft.", "Arrive at 300 Oak St"],
        summary=RouteSummaryResponse(
            distance_miles=0.14,
            beeline_miles=0.1,
            junction_count=1,
            walkable=True,
            bikeable=True,
            formatted_distance="739 ft. Walkable",
        ),
    )

    planner = mocker.Mock()
    planner.plan_route.return_value = fake_response
    mocker.patch("school_routes.views.get_route_planner", return_value=planner)

    response = _post(
        api_client, "/api/v1/route", {"start_address": "100 Main St", "end_address": "300 Oak St"}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["summary"]["distance_miles"] == 0.14
    assert payload["junctions"][0]["name"] == "Elm St & Main St"
    planner.plan_route.assert_called_once()


@pytest.mark.parametrize(
    ("error", "status", "code"),
    [
        (AddressNotFoundError("Cannot find street: 'NOWHERE ST'"), 400, "address_not_found"),
        (NoRouteFoundError("No route found"), 422, "no_route"),
        (EmptyGraphError("Junction graph is empty"), 503, "empty_graph"),
    ],
)
def test_route_maps_domain_errors(api_client, mocker, error, status: int, code: str) -> None:
    planner = mocker.Mock()
    planner.plan_route.side_effect = error
    mocker.patch("school_routes.views.get_route_planner", return_value=planner)

    response = _post(
        api_client, "/api/v1/route", {"start_address": "100 Main St", "end_address": "1 Nowhere St"}
    )

    assert response.status_code == status
    assert response.json()["error"] == {"code": code, "message": str(error)}


def test_school_distances_unknown_school_returns_404(api_client, mocker) -> None:
    planner = mocker.Mock()
    planner.school_distances.side_effect = UnknownSchoolError("Unknown schools: Nowhere Academy")
    mocker.patch("school_routes.views.get_route_planner", return_value=planner)

    response = _post(
        api_client,
        "/api/v1/school-distances",
        {"origin_address": "100 Main St", "school_names": ["Nowhere Academy"]},
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "unknown_school"


@pytest.fixture
def street_data(db) -> None:
    squares = [
        (1, 37.76, -122.43, ["MAIN ST", "ELM ST"], [2, 4]),
        (2, 37.76, -122.428735, ["MAIN ST", "PINE ST"], [3]),
        (3, 37.761, -122.428735, ["OAK ST", "PINE ST"], [4]),
        (4, 37.761, -122.43, ["OAK ST", "ELM ST"], []),
        (5, 37.77, -122.42, ["LONE ST"], []),
    ]
    Junction.objects.bulk_create(
        Junction(cnn=cnn, latitude=lat, longitude=lon, streets=streets, adjacent=adjacent)
        for cnn, lat, lon, streets, adjacent in squares
    )
    StreetAddress.objects.bulk_create(
        [
            StreetAddress(number="100", street="MAIN ST", latitude=37.76, longitude=-122.4299),
            StreetAddress(number="300", street="OAK ST", latitude=37.761, longitude=-122.4288),
            StreetAddress(number="1", street="LONE ST", latitude=37.7701, longitude=-122.4199),
        ]
    )
    School.objects.bulk_create(
        [
            School(name="Oak Elementary", types=["Elementary"], address="300 Oak St"),
            School(name="Lone High", types=["High"], address="1 Lone St"),
        ]
    )


def test_route_end_to_end(api_client, mocker, street_data) -> None:
    mocker.patch("school_routes.views.get_route_planner", return_value=RoutePlannerService())

    response = _post(
        api_client, "/api/v1/route", {"start_address": "100 Main St", "end_address": "300 Oak St"}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["start_address"] == "100 MAIN ST"
    assert payload["summary"]["junction_count"] == 3
    assert payload["summary"]["walkable"] is True
    assert payload["directions"][-1] == "Arrive at 300 Oak St"


def test_school_distances_end_to_end(api_client, mocker, street_data) -> None:
    mocker.patch("school_routes.views.get_route_planner", return_value=RoutePlannerService())

    response = _post(api_client, "/api/v1/school-distances", {"origin_address": "100 Main St"})

    assert response.status_code == 200
    schools = response.json()["schools"]
    assert [school["name"] for school in schools] == ["Oak Elementary", "Lone High"]
    assert schools[0]["distance_miles"] > 0
    assert schools[1]["distance_miles"] is None


def test_route_to_unreachable_address_returns_422(api_client, mocker, street_data) -> None:
    mocker.patch("school_routes.views.get_route_planner", return_value=RoutePlannerService())

    response = _post(
        api_client, "/api/v1/route", {"start_address": "100 Main St", "end_address": "1 Lone St"}
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "no_route"
