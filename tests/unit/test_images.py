"""Tests for image list operations."""

import random

import pytest

from app.core.images import (
    add_image,
    ensure_single_primary,
    is_valid_http_url,
    primary_image_url,
    remove_image,
    set_primary,
)
from app.errors import ConflictError, NotFoundError, ValidationError


def _primaries(images):
    return [img for img in images if img["is_primary"]]


@pytest.mark.unit
def test_first_image_is_primary_regardless_of_flag():
    images = add_image([], "https://img.example.com/a.jpg", is_primary=False)

    assert len(images) == 1
    assert images[0]["is_primary"] is True
    assert images[0]["id"]


@pytest.mark.unit
def test_primary_request_demotes_others():
    images = add_image([], "https://img.example.com/a.jpg")
    images = add_image(images, "https://img.example.com/b.jpg", is_primary=True)

    assert [img["is_primary"] for img in images] == [False, True]


@pytest.mark.unit
@pytest.mark.parametrize("url", ["ftp://x.com/a.jpg", "not a url", "", None, "https://"])
def test_rejects_non_http_urls(url):
    with pytest.raises(ValidationError):
        add_image([], url)


@pytest.mark.unit
def test_rejects_duplicate_url_case_insensitively():
    images = add_image([], "https://img.example.com/A.jpg")

    with pytest.raises(ConflictError):
        add_image(images, "  HTTPS://IMG.EXAMPLE.COM/a.JPG ")


@pytest.mark.unit
def test_eleventh_image_is_rejected_and_list_unchanged():
    images = []
    for n in range(10):
        images = add_image(images, f"https://img.example.com/{n}.jpg")
    before = [dict(img) for img in images]

    with pytest.raises(ConflictError):
        add_image(images, "https://img.example.com/10.jpg")

    assert images == before


@pytest.mark.unit
def test_removing_primary_promotes_first_remaining():
    images = add_image([], "https://img.example.com/a.jpg")
    images = add_image(images, "https://img.example.com/b.jpg")
    images = add_image(images, "https://img.example.com/c.jpg", is_primary=True)

    images = remove_image(images, images[2]["id"])

    assert images[0]["is_primary"] is True
    assert len(_primaries(images)) == 1


@pytest.mark.unit
def test_unknown_image_ids_are_not_found():
    images = add_image([], "https://img.example.com/a.jpg")

    with pytest.raises(NotFoundError):
        set_primary(images, "missing")
    with pytest.raises(NotFoundError):
        remove_image(images, "missing")


@pytest.mark.unit
def test_ensure_single_primary_heals_none_and_many():
    assert _primaries(ensure_single_primary([{"id": "1", "url": "u1"}, {"id": "2", "url": "u2"}])) == [
        {"id": "1", "url": "u1", "is_primary": True}
    ]
    healed = ensure_single_primary([
        {"id": "1", "url": "u1", "is_primary": False},
        {"id": "2", "url": "u2", "is_primary": True},
        {"id": "3", "url": "u3", "is_primary": True},
    ])
    assert [img["is_primary"] for img in healed] == [False, True, False]
    assert ensure_single_primary([]) == []


@pytest.mark.unit
def test_exactly_one_primary_after_random_operations():
    rng = random.Random(42)
    images = []
    for step in range(200):
        action = rng.choice(["add", "add", "primary", "remove"])
        if action == "add" and len(images) < 10:
            images = add_image(images, f"https://img.example.com/{step}.jpg", is_primary=rng.random() < 0.3)
        elif action == "primary" and images:
            images = set_primary(images, rng.choice(images)["id"])
        elif action == "remove" and images:
            images = remove_image(images, rng.choice(images)["id"])

        assert len(_primaries(images)) == (1 if images else 0)


@pytest.mark.unit
def test_primary_image_url_fallbacks():
    assert primary_image_url([]) is None
    assert primary_image_url(None) is None
    assert primary_image_url([{"url": "a"}, {"url": "b"}]) == "a"
    assert primary_image_url([{"url": "a", "is_primary": False}, {"url": "b", "is_primary": True}]) == "b"


@pytest.mark.unit
def test_is_valid_http_url():
    assert is_valid_http_url("http://example.com/x.png")
    assert not is_valid_http_url("javascript:alert(1)")
