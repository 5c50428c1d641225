import math

import pytest
from pydantic import ValidationError

from mapchat.data.locations import LocationDataset, default_dataset
from mapchat.models import Category

MOCK_RECORDS = {
    "Property": [
        {"name": "Dock A", "coordinates": [-96.80, 32.78], "description": "Cross-dock"},
        {"name": "Dock B", "coordinates": [-96.81, 32.79]},
    ],
    "Cafe": [{"name": "Corner Starbucks", "coordinates": [-96.79, 32.77]}],
}


def test_from_records():
    dataset = LocationDataset.from_records(MOCK_RECORDS)

    properties = dataset.get(Category.PROPERTY)
    assert [p.name for p in properties] == ["Dock A", "Dock B"]
    assert properties[0].longitude == -96.80
    assert properties[0].latitude == 32.78
    assert properties[0].category == Category.PROPERTY
    assert properties[1].description == ""
    assert len(dataset) == 3
    assert dataset.categories == (Category.PROPERTY, Category.CAFE)


def test_missing_category_is_empty():
    dataset = LocationDataset.from_records(MOCK_RECORDS)
    assert dataset.get(Category.CARRIER) == ()


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError):
        LocationDataset.from_records({"Bakery": [{"name": "x", "coordinates": [0, 0]}]})


@pytest.mark.parametrize(
    "row",
    [
        {"coordinates": [0.0, 0.0]},
        {"name": "nan", "coordinates": [math.nan, 0.0]},
        {"name": "inf", "coordinates": [0.0, math.inf]},
        {"name": "short", "coordinates": [0.0]},
    ],
)
def test_malformed_rows_are_rejected(row):
    with pytest.raises(ValidationError):
        LocationDataset.from_records({"Property": [row]})


def test_locations_are_immutable():
    point = LocationDataset.from_records(MOCK_RECORDS).get(Category.CAFE)[0]
    with pytest.raises(ValidationError):
        point.name = "Renamed"


def test_default_dataset():
    dataset = default_dataset()
    assert dataset is default_dataset()
    assert len(dataset.get(Category.PROPERTY)) == 16
    assert len(dataset.get(Category.CARRIER)) == 14
    assert len(dataset.get(Category.CAFE)) == 25
    for category in Category:
        assert all(p.category == category for p in dataset.get(category))
    names = [p.name for p in dataset.get(Category.PROPERTY)]
    assert "Dallas Logistics Hub" in names
