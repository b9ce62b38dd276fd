"""Tests for the collection mutators and batch upload."""

import asyncio

import pytest

from ourstory import store
from ourstory.codec import decode_data_url
from ourstory.logic import (
    Collections,
    add_date,
    add_image,
    delete_date,
    delete_image,
    load_collections,
    toggle_visited,
    upload_images,
)
from ourstory.models import LOCATION_PLACEHOLDER, Role
from tests.conftest import make_image_bytes

IMG_A = "data:image/jpeg;base64,QQ=="
IMG_B = "data:image/jpeg;base64,Qg=="
IMG_C = "data:image/jpeg;base64,Qw=="


def _widths(payloads: list[str]) -> list[int]:
    widths = []
    for payload in payloads:
        with decode_data_url(payload) as img:
            widths.append(img.size[0])
    return widths


def test_upload_keeps_successful_files_in_order(tmp_db, tmp_path) -> None:
    good_path = tmp_path / "wide.png"
    good_path.write_bytes(make_image_bytes(200, 50))
    files = [
        make_image_bytes(100, 50),
        b"garbage",
        good_path,
        str(tmp_path / "missing.jpg"),
        make_image_bytes(300, 50, fmt="JPEG"),
    ]
    cols = Collections(images=[])

    added = asyncio.run(upload_images(cols, files))

    assert added == 3
    assert _widths(cols.images) == [100, 200, 300]
    assert asyncio.run(store.load(store.GALLERY)) == cols.images


def test_upload_appends_after_existing_images(tmp_db) -> None:
    cols = Collections()
    asyncio.run(add_image(cols, IMG_A))
    asyncio.run(upload_images(cols, [make_image_bytes(10, 10)]))
    assert cols.images[0] == IMG_A
    assert len(cols.images) == 2


def test_upload_with_nothing_decodable_changes_nothing(tmp_db) -> None:
    cols = Collections(images=[IMG_A])
    assert asyncio.run(upload_images(cols, [b"x", b"y"])) == 0
    assert cols.images == [IMG_A]


def test_upload_respects_configured_width(tmp_db) -> None:
    cols = Collections(max_image_width=64)
    asyncio.run(upload_images(cols, [make_image_bytes(640, 64)]))
    assert _widths(cols.images) == [64]


def test_delete_image_requires_elevated_role(tmp_db) -> None:
    cols = Collections()
    for payload in (IMG_A, IMG_B, IMG_C):
        asyncio.run(add_image(cols, payload))

    assert asyncio.run(delete_image(cols, Role.STANDARD, 0)) is False
    assert asyncio.run(delete_image(cols, None, 0)) is False
    assert cols.images == [IMG_A, IMG_B, IMG_C]

    assert asyncio.run(delete_image(cols, Role.ELEVATED, 1)) is True
    assert cols.images == [IMG_A, IMG_C]
    assert asyncio.run(store.load(store.GALLERY)) == [IMG_A, IMG_C]


@pytest.mark.parametrize("index", [-1, 3, 99])
def test_delete_image_out_of_range_is_noop(tmp_db, index: int) -> None:
    cols = Collections(images=[IMG_A, IMG_B, IMG_C])
    assert asyncio.run(delete_image(cols, Role.ELEVATED, index)) is False
    assert len(cols.images) == 3


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_add_date_rejects_blank_names(tmp_db, name: str) -> None:
    cols = Collections()
    assert asyncio.run(add_date(cols, name, "Somewhere")) is None
    assert cols.dates == []
    assert asyncio.run(store.load(store.DATES)) == []


def test_add_date_defaults_location_and_puts_newest_first(tmp_db) -> None:
    cols = Collections()
    picnic = asyncio.run(add_date(cols, "Picnic", ""))
    rooftop = asyncio.run(add_date(cols, "  Secret Rooftop ", "Old town"))
    cinema = asyncio.run(add_date(cols, "Cinema"))

    assert picnic.location == LOCATION_PLACEHOLDER
    assert cinema.location == LOCATION_PLACEHOLDER
    assert rooftop.name == "Secret Rooftop"
    assert rooftop.location == "Old town"
    assert [d.name for d in cols.dates] == ["Cinema", "Secret Rooftop", "Picnic"]
    assert len({d.id for d in cols.dates}) == 3
    assert not any(d.visited for d in cols.dates)
    assert asyncio.run(store.load(store.DATES)) == cols.dates


def test_toggle_visited_flips_and_persists(tmp_db) -> None:
    cols = Collections()
    picnic = asyncio.run(add_date(cols, "Picnic"))

    assert asyncio.run(toggle_visited(cols, picnic.id)) is True
    assert cols.dates[0].visited is True
    assert asyncio.run(store.load(store.DATES))[0].visited is True

    assert asyncio.run(toggle_visited(cols, picnic.id)) is True
    assert cols.dates[0].visited is False
    assert cols.dates[0].date_added == picnic.date_added


def test_toggle_unknown_id_is_noop(tmp_db) -> None:
    cols = Collections()
    asyncio.run(add_date(cols, "Picnic"))
    assert asyncio.run(toggle_visited(cols, "nope")) is False
    assert cols.dates[0].visited is False


def test_delete_date_requires_elevated_role(tmp_db) -> None:
    cols = Collections()
    picnic = asyncio.run(add_date(cols, "Picnic"))
    asyncio.run(add_date(cols, "Cinema"))

    assert asyncio.run(delete_date(cols, Role.STANDARD, picnic.id)) is False
    assert len(cols.dates) == 2

    assert asyncio.run(delete_date(cols, Role.ELEVATED, "unknown")) is False
    assert len(cols.dates) == 2

    assert asyncio.run(delete_date(cols, Role.ELEVATED, picnic.id)) is True
    assert [d.name for d in cols.dates] == ["Cinema"]
    assert [d.name for d in asyncio.run(store.load(store.DATES))] == ["Cinema"]


def test_collections_survive_restart(tmp_db) -> None:
    cols = Collections()
    asyncio.run(add_image(cols, IMG_A))
    asyncio.run(add_date(cols, "Picnic", "Park"))

    reloaded = asyncio.run(load_collections({"max_image_width": 640, "image_quality": 0.5}))
    assert reloaded.images == [IMG_A]
    assert [(d.name, d.location) for d in reloaded.dates] == [("Picnic", "Park")]
    assert reloaded.max_image_width == 640
    assert reloaded.image_quality == 0.5
