import pytest

from trucknav.models.domain import Coordinate, ImperialTruckProfile, Stop
from trucknav.services.units import to_metric


@pytest.fixture
def semi_profile():
    return to_metric(ImperialTruckProfile())


@pytest.fixture
def nashville() -> Coordinate:
    return Coordinate(36.1627, -86.7816)


@pytest.fixture
def memphis() -> Coordinate:
    return Coordinate(35.1495, -90.0490)


@pytest.fixture
def three_stops() -> list[Stop]:
    return [
        Stop(name="Jackson", coordinate=Coordinate(35.6145, -88.8139), id="stop-a"),
        Stop(name="Lebanon", coordinate=Coordinate(36.2081, -86.2911), id="stop-b"),
        Stop(name="Dickson", coordinate=Coordinate(36.0770, -87.3878), id="stop-c"),
    ]
