"""
Unit Tests for campaign media URL helpers

Resized-image URL rewriting and (bucket, path) extraction for cleanup.
"""

import pytest
from urllib.parse import parse_qsl, urlsplit

from microservices.campaign_service.media import (
    CARD_THUMBNAIL,
    DETAIL_PORTRAIT,
    ImageTransform,
    ResizeMode,
    get_storage_info,
    public_object_url,
    transform_image_url,
)

BASE = "https://project.supabase.co/storage/v1"


class TestTransformImageUrl:
    """Render-endpoint rewriting of object URLs"""

    def test_object_url_is_rewritten_to_render_endpoint(self):
        url = f"{BASE}/object/public/portraits/portraits/abc.png"

        result = transform_image_url(url, CARD_THUMBNAIL)

        parts = urlsplit(result)
        assert parts.path == "/storage/v1/render/image/public/portraits/portraits/abc.png"
        assert parse_qsl(parts.query) == [("width", "400"), ("height", "400"), ("resize", "contain")]

    def test_detail_portrait_size(self):
        url = f"{BASE}/object/public/portraits/x.jpg"

        result = transform_image_url(url, DETAIL_PORTRAIT)

        assert "width=384" in result
        assert "height=384" in result

    def test_only_first_object_segment_is_replaced(self):
        url = f"{BASE}/object/public/portraits/object/x.png"

        result = transform_image_url(url, CARD_THUMBNAIL)

        assert urlsplit(result).path == "/storage/v1/render/image/public/portraits/object/x.png"

    def test_existing_query_params_are_kept(self):
        url = f"{BASE}/object/public/portraits/x.png?token=abc&width=10"

        result = transform_image_url(url, ImageTransform(200, 100))

        params = parse_qsl(urlsplit(result).query)
        assert ("token", "abc") in params
        assert ("width", "200") in params
        assert ("width", "10") not in params
        assert ("height", "100") in params
        assert all(key != "resize" for key, _ in params)

    def test_resize_mode_is_serialized(self):
        url = f"{BASE}/object/public/portraits/x.png"

        result = transform_image_url(url, ImageTransform(50, 50, ResizeMode.COVER))

        assert result.endswith("resize=cover")

    def test_url_without_object_segment_is_unchanged(self):
        url = "https://cdn.example.com/images/portrait.png"

        assert transform_image_url(url, CARD_THUMBNAIL) == url

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_input_gives_empty_string(self, value):
        assert transform_image_url(value, CARD_THUMBNAIL) == ""

    def test_relative_url_is_returned_unchanged(self):
        url = "/object/public/portraits/x.png"

        assert transform_image_url(url, CARD_THUMBNAIL) == url

    def test_garbage_is_returned_unchanged(self):
        assert transform_image_url("not a url", CARD_THUMBNAIL) == "not a url"


class TestGetStorageInfo:
    """(bucket, path) extraction from public object URLs"""

    def test_extracts_bucket_and_nested_path(self):
        url = public_object_url(BASE, "portraits", "portraits/abc.png")

        assert get_storage_info(url) == ("portraits", "portraits/abc.png")

    def test_resume_url(self):
        url = f"{BASE}/object/public/resumes/resumes/cv.pdf"

        assert get_storage_info(url) == ("resumes", "resumes/cv.pdf")

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "https://cdn.example.com/images/portrait.png",
            f"{BASE}/object/public/portraits",
            f"{BASE}/object/public/portraits/",
            "portraits/abc.png",
        ],
    )
    def test_unparseable_urls_give_none(self, url):
        assert get_storage_info(url) is None

    def test_public_object_url_shape(self):
        assert (
            public_object_url(BASE, "resumes", "resumes/a.pdf")
            == f"{BASE}/object/public/resumes/resumes/a.pdf"
        )
