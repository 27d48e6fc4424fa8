"""Tests for capability URL helpers."""

import pytest

from photo_feed.adapters.capability_urls import (
    container_list_url,
    extract_blob_name,
    is_blob_url,
    resolve,
    strip_token,
)

ROOT = "https://acct.blob.core.windows.net/photo?sv=2024&sig=abc"


def test_resolve_inserts_blob_before_token() -> None:
    url = resolve(ROOT, "photo-1.png")

    assert url == "https://acct.blob.core.windows.net/photo/photo-1.png?sv=2024&sig=abc"


def test_resolve_without_token_and_trailing_slash() -> None:
    url = resolve("https://acct.blob.core.windows.net/photo/", "a b.jpg")

    assert url == "https://acct.blob.core.windows.net/photo/a%20b.jpg"


def test_resolve_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        resolve(ROOT, "")
    with pytest.raises(ValueError):
        resolve("not-a-url?sig=abc", "photo-1.png")


def test_extract_blob_name_inverts_resolve() -> None:
    assert extract_blob_name(resolve(ROOT, "photo-12.webp")) == "photo-12.webp"
    assert extract_blob_name(resolve(ROOT, "a b.jpg")) == "a b.jpg"


def test_extract_blob_name_rejects_bare_container() -> None:
    with pytest.raises(ValueError):
        extract_blob_name("https://acct.blob.core.windows.net/")


def test_container_list_url_appends_listing_params() -> None:
    assert container_list_url(ROOT) == (
        "https://acct.blob.core.windows.net/photo"
        "?sv=2024&sig=abc&restype=container&comp=list"
    )
    assert container_list_url(ROOT, marker="next/1").endswith("&marker=next/1")


def test_strip_token_and_blob_url_detection() -> None:
    url = resolve(ROOT, "photo-1.png")

    assert strip_token(url) == "https://acct.blob.core.windows.net/photo/photo-1.png"
    assert is_blob_url(url, ROOT)
    assert is_blob_url("https://other.blob.core.windows.net/photo/x.png", ROOT)
    assert not is_blob_url("https://images.example.com/x.png", ROOT)
    assert not is_blob_url("photo-1.png", ROOT)
