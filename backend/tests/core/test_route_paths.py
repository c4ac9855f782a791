"""Route Paths — tests for resource naming and path construction.

Tests cover:
    - Leading "I" marker stripped once, only before an upper-case letter
    - First matching suffix stripped, never more than one
    - build_route_path joins base, resource and operation; trailing "/" dropped
"""

import pytest

from dynamic_api.core.route_paths import build_route_path, resource_name
from tests.sample_clients import IKulupClient, IThing


@pytest.mark.parametrize("type_name, expected", [
    ("IKulupClient", "Kulup"),
    ("IOrderService", "Order"),
    ("IWeatherApi", "Weather"),
    ("IThing", "Thing"),
])
def test_resource_name_documented_examples(type_name, expected):
    assert resource_name(type_name) == expected


def test_resource_name_strips_only_first_matching_suffix():
    assert resource_name("IPaymentApiClient") == "PaymentApi"
    assert resource_name("IClientService") == "Client"


def test_resource_name_strips_marker_exactly_once():
    assert resource_name("IIndexClient") == "Index"
    assert resource_name("IIFoo") == "IFoo"


def test_resource_name_keeps_names_without_marker():
    assert resource_name("Inventory") == "Inventory"
    assert resource_name("KulupClient") == "Kulup"


def test_marker_kept_when_followed_by_lower_case():
    assert resource_name("InventoryClient") == "Inventory"
    assert resource_name("ItemService") == "Item"


def test_resource_name_never_empties_the_name():
    assert resource_name("IClient") == "Client"


def test_build_route_path_format():
    assert build_route_path("/api", IKulupClient, "list_members") == (
        "/api/Kulup/list_members"
    )


def test_build_route_path_drops_trailing_slash():
    assert build_route_path("/api/", IThing, "describe") == "/api/Thing/describe"
    assert build_route_path("", IThing, "describe") == "/Thing/describe"
