"""Tests for ObjectMetadata (validation, access tracking, persistence format)."""

from datetime import UTC, datetime, timedelta

import pytest

from app.domain.entities.stored_object import ObjectMetadata
from app.domain.exceptions import ValidationException

KEY = "ab" * 32


def _meta(**overrides) -> ObjectMetadata:
    fields = {"private_key": KEY, "original_name": "a.txt", "mime_type": "text/plain", "size": 5}
    fields.update(overrides)
    return ObjectMetadata.new(**fields)


def test_new_sets_both_timestamps() -> None:
    meta = _meta()
    assert meta.uploaded_at == meta.last_accessed
    assert meta.uploaded_at.tzinfo is not None


@pytest.mark.parametrize("name", ["", None, 42])
def test_rejects_invalid_original_name(name) -> None:
    with pytest.raises(ValidationException):
        _meta(original_name=name)


@pytest.mark.parametrize("size", [-1, "5", True, 1.5])
def test_rejects_invalid_size(size) -> None:
    with pytest.raises(ValidationException):
        _meta(size=size)


def test_touch_never_moves_backward() -> None:
    meta = _meta()
    before = meta.last_accessed
    meta.touch(before - timedelta(hours=1))
    assert meta.last_accessed == before
    later = before + timedelta(minutes=5)
    meta.touch(later)
    assert meta.last_accessed == later


def test_inactivity_cutoff_is_strict() -> None:
    meta = _meta()
    assert not meta.is_inactive_since(meta.last_accessed)
    assert meta.is_inactive_since(meta.last_accessed + timedelta(seconds=1))


def test_dict_roundtrip_uses_camel_case() -> None:
    meta = _meta()
    data = meta.to_dict()
    assert set(data) == {"privateKey", "originalName", "mimeType", "size", "uploadedAt", "lastAccessed"}
    assert ObjectMetadata.from_dict(data) == meta


def test_from_dict_defaults_mime_and_assumes_utc() -> None:
    meta = ObjectMetadata.from_dict(
        {
            "privateKey": KEY,
            "originalName": "x.bin",
            "size": 3,
            "uploadedAt": "2024-01-01T00:00:00",
            "lastAccessed": "2024-01-02T00:00:00",
        }
    )
    assert meta.mime_type == "application/octet-stream"
    assert meta.last_accessed == datetime(2024, 1, 2, tzinfo=UTC)


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"privateKey": KEY, "originalName": "", "size": 1, "uploadedAt": "2024-01-01", "lastAccessed": "2024-01-01"},
        {"privateKey": KEY, "originalName": "a", "size": "big", "uploadedAt": "2024-01-01", "lastAccessed": "2024-01-01"},
        {"privateKey": KEY, "originalName": "a", "size": 1, "uploadedAt": "yesterday", "lastAccessed": "2024-01-01"},
        {"privateKey": KEY, "originalName": "a", "size": 1},
        {"privateKey": "\u00e9", "originalName": "a", "size": 1, "uploadedAt": "2024-01-01", "lastAccessed": "2024-01-01"},
        {"privateKey": KEY.upper(), "originalName": "a", "size": 1, "uploadedAt": "2024-01-01", "lastAccessed": "2024-01-01"},
        {"originalName": "a", "size": 1, "uploadedAt": "2024-01-01", "lastAccessed": "2024-01-01"},
    ],
)
def test_from_dict_rejects_corrupt_documents(data) -> None:
    with pytest.raises(ValueError):
        ObjectMetadata.from_dict(data)
