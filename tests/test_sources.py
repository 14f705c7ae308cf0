import json

import pytest
import requests

from storyslides.common import (
    ConfigurationError,
    PhotoSourceError,
    load_mapping_file,
    load_photo,
    resolve_request_timeout,
)
from storyslides.common import sources


class _Response:
    def __init__(self, content=b"", status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")


class TestLoadPhoto:
    def test_bytes_pass_through(self):
        assert load_photo(bytearray(b"abc")) == b"abc"

    def test_reads_file(self, tmp_path, photo_bytes):
        path = tmp_path / "photo.jpg"
        path.write_bytes(photo_bytes)

        assert load_photo(path) == photo_bytes
        assert load_photo(str(path)) == photo_bytes

    @pytest.mark.parametrize("source", [b"", "", "   "])
    def test_empty_sources_are_rejected(self, source):
        with pytest.raises(PhotoSourceError):
            load_photo(source)

    def test_missing_file(self, tmp_path):
        with pytest.raises(PhotoSourceError):
            load_photo(tmp_path / "missing.jpg")

    def test_downloads_url(self, monkeypatch):
        seen = {}

        def fake_get(url, timeout):
            seen["args"] = (url, timeout)
            return _Response(b"jpeg-bytes")

        monkeypatch.setattr(sources.requests, "get", fake_get)

        assert load_photo("https://example.com/a.jpg", timeout=5) == b"jpeg-bytes"
        assert seen["args"] == ("https://example.com/a.jpg", 5.0)

    def test_download_failure(self, monkeypatch):
        monkeypatch.setattr(sources.requests, "get", lambda url, timeout: _Response(status=404))

        with pytest.raises(PhotoSourceError):
            load_photo("http://example.com/missing.jpg")


class TestRequestTimeout:
    def test_env_value(self, monkeypatch):
        monkeypatch.setenv("STORYSLIDES_REQUEST_TIMEOUT", "12.5")

        assert resolve_request_timeout() == 12.5

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("STORYSLIDES_REQUEST_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError):
            resolve_request_timeout()

    def test_explicit_value_wins(self, monkeypatch):
        monkeypatch.setenv("STORYSLIDES_REQUEST_TIMEOUT", "12.5")

        assert resolve_request_timeout(3) == 3.0


class TestLoadMappingFile:
    def test_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("style:\n  fontSize: 60\n", encoding="utf-8")

        assert load_mapping_file(path) == {"style": {"fontSize": 60}}

    def test_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"split": {"minSlides": 3}}), encoding="utf-8")

        assert load_mapping_file(path) == {"split": {"minSlides": 3}}

    def test_empty_yaml_is_empty_mapping(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")

        assert load_mapping_file(path) == {}

    def test_non_mapping_is_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_mapping_file(path)

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "settings.toml"
        path.write_text("a = 1", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_mapping_file(path)
