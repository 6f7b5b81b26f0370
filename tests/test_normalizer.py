"""
Tests for inbound request normalization.
"""
import base64
import io

import pytest
from PIL import Image

from ketometer.core.errors import InvalidRequest
from ketometer.models.request import AnalysisMode
from ketometer.services.normalizer import normalize_request


class TestMode:
    """Tests for mode validation."""

    @pytest.mark.parametrize("content", [None, "", "grilled salmon"])
    def test_rejects_unknown_mode(self, content, png_base64):
        payload = {"inputType": "bogus", "content": content,
                   "imageData": [{"base64": png_base64, "type": "image/png"}]}

        with pytest.raises(InvalidRequest, match="missing mode"):
            normalize_request(payload)

    def test_rejects_absent_mode(self):
        with pytest.raises(InvalidRequest, match="missing mode"):
            normalize_request({"content": "eggs"})

    def test_rejects_non_string_mode(self):
        with pytest.raises(InvalidRequest, match="missing mode"):
            normalize_request({"inputType": 1, "content": "eggs"})

    def test_rejects_non_object_payload(self):
        with pytest.raises(InvalidRequest, match="JSON object"):
            normalize_request(["text", "eggs"])


class TestTextMode:
    """Tests for text requests."""

    def test_accepts_description(self):
        request = normalize_request({"inputType": "text", "content": "  bacon and eggs  "})

        assert request.mode is AnalysisMode.TEXT
        assert request.content == "bacon and eggs"
        assert request.images == []

    @pytest.mark.parametrize("content", [None, "", "   \n\t"])
    def test_rejects_empty_content(self, content):
        with pytest.raises(InvalidRequest, match="missing content"):
            normalize_request({"inputType": "text", "content": content})

    def test_rejects_non_string_content(self):
        with pytest.raises(InvalidRequest, match="content must be a string"):
            normalize_request({"inputType": "text", "content": ["eggs"]})

    def test_ignores_attached_images(self, png_base64):
        request = normalize_request({
            "inputType": "text",
            "content": "eggs",
            "imageData": [{"base64": png_base64, "type": "image/png"}],
        })

        assert request.images == []


class TestImageModes:
    """Tests for image and menu requests."""

    @pytest.mark.parametrize("mode", ["image", "menu"])
    def test_requires_images(self, mode):
        with pytest.raises(InvalidRequest, match="missing images"):
            normalize_request({"inputType": mode, "content": "dinner"})

    @pytest.mark.parametrize("mode", ["image", "menu"])
    def test_rejects_empty_image_list(self, mode):
        with pytest.raises(InvalidRequest, match="missing images"):
            normalize_request({"inputType": mode, "imageData": []})

    def test_decodes_images_in_order(self, image_factory):
        first = image_factory(color="red")
        second = image_factory(color="blue", fmt="JPEG")

        request = normalize_request({
            "inputType": "menu",
            "imageData": [
                {"uri": "file:///1.png", "base64": first, "type": "image/png"},
                {"uri": "file:///2.jpg", "base64": second, "type": "image/jpeg"},
            ],
        })

        assert request.mode is AnalysisMode.MENU
        assert [img.uri for img in request.images] == ["file:///1.png", "file:///2.jpg"]
        assert request.images[0].data.startswith(b"\x89PNG")
        assert request.images[1].media_type == "image/jpeg"
        assert request.content is None

    def test_keeps_optional_note(self, png_base64):
        request = normalize_request({
            "inputType": "image",
            "content": "homemade, no sugar added",
            "imageData": [{"base64": png_base64, "type": "image/png"}],
        })

        assert request.content == "homemade, no sugar added"

    def test_accepts_data_uri(self, png_base64):
        request = normalize_request({
            "inputType": "image",
            "imageData": [{"base64": f"data:image/png;base64,{png_base64}", "type": "image/png"}],
        })

        assert len(request.images) == 1

    def test_infers_media_type_from_bare_image_kind(self, image_factory):
        request = normalize_request({
            "inputType": "image",
            "imageData": [{"base64": image_factory(fmt="JPEG"), "type": "image"}],
        })

        assert request.images[0].media_type == "image/jpeg"

    def test_detected_format_overrides_declared_type(self, image_factory):
        request = normalize_request({
            "inputType": "image",
            "imageData": [{"base64": image_factory(fmt="JPEG"), "type": "image/png"}],
        })

        assert request.images[0].media_type == "image/jpeg"

    def test_rejects_non_image_media_type(self, png_base64):
        with pytest.raises(InvalidRequest, match="unsupported media type"):
            normalize_request({
                "inputType": "image",
                "imageData": [{"base64": png_base64, "type": "application/pdf"}],
            })

    def test_rejects_invalid_base64(self):
        with pytest.raises(InvalidRequest, match=r"invalid imageData\[0\]"):
            normalize_request({
                "inputType": "image",
                "imageData": [{"base64": "not base64!!", "type": "image/png"}],
            })

    def test_rejects_bytes_that_are_not_an_image(self):
        with pytest.raises(InvalidRequest, match="unreadable image"):
            normalize_request({
                "inputType": "image",
                "imageData": [{"base64": "aGVsbG8gd29ybGQ=", "type": "image/png"}],
            })

    def test_rejects_entry_without_base64(self):
        with pytest.raises(InvalidRequest, match=r"invalid imageData\[0\]"):
            normalize_request({"inputType": "image", "imageData": [{"uri": "file:///1.png"}]})

    def test_rejects_non_list_image_data(self, png_base64):
        with pytest.raises(InvalidRequest, match="must be an array"):
            normalize_request({"inputType": "image", "imageData": png_base64})

    def test_rejects_too_many_images(self, png_base64):
        images = [{"base64": png_base64, "type": "image/png"}] * 3

        with pytest.raises(InvalidRequest, match="too many images"):
            normalize_request({"inputType": "menu", "imageData": images}, max_images=2)

    def test_rejects_oversized_image(self, png_base64):
        with pytest.raises(InvalidRequest, match="too large"):
            normalize_request(
                {"inputType": "image", "imageData": [{"base64": png_base64, "type": "image/png"}]},
                max_image_bytes=10,
            )

    def test_rejects_truncated_jpeg(self):
        buf = io.BytesIO()
        Image.effect_noise((300, 200), 64).convert("RGB").save(buf, format="JPEG")
        data = buf.getvalue()
        truncated = base64.b64encode(data[:len(data) // 2]).decode()

        with pytest.raises(InvalidRequest, match="unreadable image"):
            normalize_request({
                "inputType": "image",
                "imageData": [{"base64": truncated, "type": "image/jpeg"}],
            })
