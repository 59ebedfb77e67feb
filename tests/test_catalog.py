from __future__ import annotations

import json
from pathlib import Path

import pytest

from bike_hotels.destinations import CityCatalog
from bike_hotels.errors import CityNotConfiguredError

REPO_CATALOG = Path(__file__).resolve().parents[1] / "data" / "cities" / "catalog.json"


def test_builtin_catalog_resolves_case_and_space_insensitively():
    catalog = CityCatalog.builtin()

    chicago = catalog.resolve("Chicago")
    assert chicago.key == "chicago"
    assert chicago.center == (41.878, -87.629)
    assert chicago.bbox.contains(41.878, -87.629)
    assert catalog.resolve("New York").key == "newyork"
    assert catalog.resolve("  NEWYORK ").name == "New York"


def test_unknown_city_raises_with_known_keys():
    with pytest.raises(CityNotConfiguredError) as excinfo:
        CityCatalog.builtin().resolve("Atlantis")

    assert "Atlantis" in str(excinfo.value)
    assert excinfo.value.http_status == 404


def test_load_overlays_file_entries_on_builtins(tmp_path):
    path = tmp_path / "cities.json"
    path.write_text(
        json.dumps(
            {
                "cities": [
                    {
                        "name": "Austin",
                        "bbox": {
                            "coords": [[30.1, -97.9], [30.5, -97.9], [30.5, -97.5], [30.1, -97.5]],
                            "center": {"lat": 30.27, "lng": -97.74},
                        },
                    }
                ]
            }
        )
    )

    catalog = CityCatalog.load(path)

    assert catalog.source == path
    assert catalog.keys() == ("austin", "chicago", "newyork")
    assert catalog.resolve("austin").center == (30.27, -97.74)


def test_shipped_catalog_loads():
    catalog = CityCatalog.load(REPO_CATALOG)

    assert {"boston", "sanfrancisco", "chicago"} <= set(catalog.keys())
    assert catalog.resolve("San Francisco").bbox.contains(37.7749, -122.4194)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CityCatalog.load(tmp_path / "nope.json")
