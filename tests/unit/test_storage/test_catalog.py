"""Tests for repo_gallery.storage.catalog module.

Covers:
    - prepend_entry / remove_by_filename: ordering, uniqueness, round-trip
    - decode_catalog: valid, malformed, wrong shape
    - encode_catalog: field names, optional sha
"""

import json

import pytest

from repo_gallery.storage.catalog import (
    Catalog,
    ImageEntry,
    decode_catalog,
    encode_catalog,
    prepend_entry,
    remove_by_filename,
)


def _entry(filename, **overrides):
    data = {
        "filename": filename,
        "description": overrides.pop("description", ""),
        "url": f"https://github.com/octocat/photos/blob/main/images/{filename}?raw=true",
        "timestamp": "2026-01-01T00:00:00.000Z",
    }
    data.update(overrides)
    return ImageEntry(**data)


@pytest.mark.fast
class TestMutations:
    """Tests for prepend_entry() and remove_by_filename()."""

    def test_prepend_puts_newest_first(self):
        catalog = Catalog(images=[_entry("1_a.png"), _entry("2_b.png")])
        result = prepend_entry(catalog, _entry("3_c.png"))
        assert result.filenames() == ["3_c.png", "1_a.png", "2_b.png"]

    def test_prepend_does_not_mutate_input(self):
        catalog = Catalog(images=[_entry("1_a.png")])
        prepend_entry(catalog, _entry("2_b.png"))
        assert catalog.filenames() == ["1_a.png"]

    def test_prepend_replaces_same_filename(self):
        catalog = Catalog(images=[_entry("1_a.png", description="old"), _entry("2_b.png")])
        result = prepend_entry(catalog, _entry("1_a.png", description="new"))
        assert result.filenames() == ["1_a.png", "2_b.png"]
        assert result.images[0].description == "new"

    def test_remove_existing(self):
        catalog = Catalog(images=[_entry("1_a.png"), _entry("2_b.png")])
        assert remove_by_filename(catalog, "1_a.png").filenames() == ["2_b.png"]

    def test_remove_missing_is_noop(self):
        catalog = Catalog(images=[_entry("1_a.png")])
        assert remove_by_filename(catalog, "9_z.png") == catalog

    @pytest.mark.parametrize(
        "existing",
        [[], ["1_a.png"], ["1_a.png", "2_b.png", "3_c.png"]],
    )
    def test_prepend_then_remove_round_trip(self, existing):
        catalog = Catalog(images=[_entry(name) for name in existing])
        new = _entry("99_new.png", sha="abc")
        assert remove_by_filename(prepend_entry(catalog, new), new.filename) == catalog

    def test_contains_and_get(self):
        catalog = Catalog(images=[_entry("1_a.png", description="x")])
        assert "1_a.png" in catalog
        assert "2_b.png" not in catalog
        assert catalog.get("1_a.png").description == "x"
        assert catalog.get("2_b.png") is None


@pytest.mark.fast
class TestDecodeCatalog:
    """Tests for decode_catalog()."""

    def test_valid_document(self):
        content = json.dumps({"images": [_entry("1_a.png").model_dump()]}).encode()
        decoded = decode_catalog(content)
        assert not decoded.corrupt
        assert decoded.catalog.filenames() == ["1_a.png"]

    @pytest.mark.parametrize(
        "content",
        [
            b"",
            b"{",
            b"not json at all",
            b"\xff\xfe\x00",
            b"[]",
            b'{"images": null}',
            b'{"images": [{"description": "missing filename"}]}',
            b'"just a string"',
        ],
    )
    def test_malformed_yields_empty_corrupt(self, content):
        decoded = decode_catalog(content)
        assert decoded.corrupt
        assert decoded.catalog == Catalog()
        assert decoded.error

    def test_missing_images_key_is_empty(self):
        decoded = decode_catalog(b"{}")
        assert not decoded.corrupt
        assert decoded.catalog.images == []

    def test_unknown_fields_survive(self):
        data = {"images": [dict(_entry("1_a.png").model_dump(exclude_none=True), width=640)]}
        decoded = decode_catalog(json.dumps(data).encode())
        reencoded = json.loads(encode_catalog(decoded.catalog))
        assert reencoded["images"][0]["width"] == 640


@pytest.mark.fast
class TestEncodeCatalog:
    """Tests for encode_catalog()."""

    def test_field_names(self):
        catalog = Catalog(images=[_entry("1_a.png", description="Sunset", sha="f00")])
        data = json.loads(encode_catalog(catalog))
        assert list(data) == ["images"]
        assert set(data["images"][0]) == {"filename", "description", "url", "timestamp", "sha"}
        assert data["images"][0]["sha"] == "f00"

    def test_sha_omitted_when_unset(self):
        data = json.loads(encode_catalog(Catalog(images=[_entry("1_a.png")])))
        assert "sha" not in data["images"][0]

    def test_empty_catalog(self):
        assert json.loads(encode_catalog(Catalog())) == {"images": []}

    def test_indented_utf8(self):
        content = encode_catalog(Catalog(images=[_entry("1_a.png", description="café")]))
        assert b"\n  " in content
        assert "café" in content.decode("utf-8")

    def test_decode_of_encode_is_identity(self):
        catalog = Catalog(images=[_entry("2_b.png", sha="1"), _entry("1_a.png")])
        assert decode_catalog(encode_catalog(catalog)).catalog == catalog
