"""Tests for repo_gallery.storage.naming module.

Covers:
    - sanitize_filename: character replacement, length preservation
    - generate_filename: timestamp prefix, format
    - build_image_url / blob_path: derived addresses
"""

import re
from datetime import datetime, timezone

import pytest

from repo_gallery.config import StoreConfig
from repo_gallery.storage.naming import (
    blob_path,
    build_image_url,
    epoch_millis,
    generate_filename,
    is_plain_filename,
    iso_timestamp,
    sanitize_filename,
)

SAFE = re.compile(r"^[A-Za-z0-9.-]*$")


@pytest.mark.fast
class TestSanitizeFilename:
    """Tests for sanitize_filename()."""

    def test_safe_name_unchanged(self):
        assert sanitize_filename("photo-1.png") == "photo-1.png"

    def test_spaces_and_parens(self):
        assert sanitize_filename("My Photo (1).png") == "My_Photo__1_.png"

    def test_underscore_maps_to_itself(self):
        assert sanitize_filename("a_b.png") == "a_b.png"

    def test_each_char_replaced_individually(self):
        assert sanitize_filename("a  b") == "a__b"

    def test_unicode(self):
        assert sanitize_filename("café.jpg") == "caf_.jpg"

    def test_path_separators(self):
        assert sanitize_filename("../etc/passwd") == ".._etc_passwd"

    def test_empty(self):
        assert sanitize_filename("") == ""

    @pytest.mark.parametrize(
        "name",
        ["photo.png", "ünïcödé 名前.gif", "!@#$%^&*()", "tab\tnew\nline", "a/b\\c", "x" * 300],
    )
    def test_output_only_safe_characters(self, name):
        result = sanitize_filename(name)
        stripped = result.replace("_", "")
        assert SAFE.match(stripped)
        assert len(result) == len(name)


@pytest.mark.fast
class TestGenerateFilename:
    """Tests for generate_filename()."""

    def test_format(self, fixed_now):
        assert generate_filename("photo.png", fixed_now) == "1770640215123_photo.png"

    def test_default_now_has_millis_prefix(self):
        filename = generate_filename("photo.png")
        assert re.match(r"^\d{13}_photo\.png$", filename)

    def test_sanitizes_name(self, fixed_now):
        assert generate_filename("my pic.png", fixed_now).endswith("_my_pic.png")

    def test_prefix_is_epoch_millis(self, fixed_now):
        prefix, _ = generate_filename("a.png", fixed_now).split("_", 1)
        assert int(prefix) == epoch_millis(fixed_now)


@pytest.mark.fast
class TestTimestamps:
    """Tests for iso_timestamp() and epoch_millis()."""

    def test_iso_timestamp_millis_and_z(self, fixed_now):
        assert iso_timestamp(fixed_now) == "2026-02-09T12:30:15.123Z"

    def test_iso_timestamp_converts_to_utc(self):
        from datetime import timedelta

        local = datetime(2026, 2, 9, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert iso_timestamp(local) == "2026-02-09T12:00:00.000Z"

    def test_epoch_millis(self):
        assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000


@pytest.mark.fast
class TestDerivedAddresses:
    """Tests for blob_path() and build_image_url()."""

    def test_blob_path(self, store_config):
        assert blob_path(store_config, "1_a.png") == "images/1_a.png"

    def test_image_url_template(self, store_config):
        url = build_image_url(store_config, "1_a.png")
        assert url == "https://github.com/octocat/photos/blob/main/images/1_a.png?raw=true"

    def test_image_url_uses_branch(self):
        config = StoreConfig(token="t", repo="me/pics", branch="gh-pages")
        url = build_image_url(config, "1_a.png")
        assert url == "https://github.com/me/pics/blob/gh-pages/images/1_a.png?raw=true"

    def test_image_folder_shared_by_path_and_url(self):
        config = StoreConfig(token="t", repo="me/pics", images_dir="photos")
        assert blob_path(config, "1_a.png") == "photos/1_a.png"
        assert build_image_url(config, "1_a.png") == (
            "https://github.com/me/pics/blob/main/photos/1_a.png?raw=true"
        )


@pytest.mark.fast
class TestIsPlainFilename:
    """Tests for is_plain_filename()."""

    @pytest.mark.parametrize("name", ["1_a.png", "1770640215123_My_Photo__1_.png", "..png", "a..b"])
    def test_plain_names(self, name):
        assert is_plain_filename(name)

    @pytest.mark.parametrize(
        "name", ["", ".", "..", "../metadata.json", "images/1_a.png", "..\\metadata.json", "/1_a.png"]
    )
    def test_names_with_path_components(self, name):
        assert not is_plain_filename(name)

    def test_generated_names_are_plain(self, fixed_now):
        assert is_plain_filename(generate_filename("../../etc/passwd", fixed_now))
