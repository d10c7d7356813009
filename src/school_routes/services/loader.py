from __future__ import annotations

import logging

from school_routes.models import Junction, School, StreetAddress
from school_routes.services.addresses import AddressBook
from school_routes.services.graph import JunctionGraph
from school_routes.services.types import SchoolRecord

logger = logging.getLogger(__name__)


def load_junction_graph() -> JunctionGraph:
    rows = Junction.objects.values_list("cnn", "latitude", "longitude", "streets", "adjacent")
    graph = JunctionGraph.from_records(rows.iterator(chunk_size=5000))
    logger.info("Loaded %d junctions on %d streets", len(graph), len(graph.streets))
    return graph


def load_address_book() -> AddressBook:
    rows = StreetAddress.objects.values_list("number", "street", "latitude", "longitude")
    book = AddressBook.from_rows(rows.iterator(chunk_size=5000))
    logger.info("Loaded %d street addresses", len(book))
    return book


def load_schools() -> list[SchoolRecord]:
    return [
        SchoolRecord(name=name, types=tuple(types), address=address)
        for name, types, address in School.objects.values_list("name", "types", "address")
    ]
