"""Unit tests for image intake, reply cleaning and the model call.

The model is always a fake chat model; nothing here touches the network.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring

import base64

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from config.settings import get_settings
from extractor import (
    ExtractionError,
    ImageInputError,
    MissingApiKeyError,
    NoTableFoundError,
    build_model,
    extract_csv,
)
from extractor.cleaning import is_no_table_marker, strip_code_fences
from extractor.core.memory import ResultStore
from extractor.core.prompt import EXTRACTION_PROMPT
from extractor.gemini import _reply_text, build_message
from extractor.image import from_bytes, from_data_url

# ===========================================================================
# Image intake
# ===========================================================================


class TestFromBytes:

    def test_encodes_base64(self, png_bytes):
        image = from_bytes(png_bytes, "image/png")
        assert image.mime_type == "image/png"
        assert base64.b64decode(image.data) == png_bytes
        assert image.size == len(png_bytes)

    def test_mime_normalized(self, png_bytes):
        assert from_bytes(png_bytes, " Image/PNG ").mime_type == "image/png"

    @pytest.mark.parametrize("mime", [None, "", "application/pdf", "text/plain"])
    def test_non_image_rejected(self, png_bytes, mime):
        with pytest.raises(ImageInputError):
            from_bytes(png_bytes, mime)

    def test_empty_rejected(self):
        with pytest.raises(ImageInputError, match="empty"):
            from_bytes(b"", "image/png")

    def test_too_large_rejected(self, png_bytes):
        with pytest.raises(ImageInputError, match="limit"):
            from_bytes(png_bytes, "image/png", max_bytes=10)


class TestFromDataUrl:

    def test_parses_mime_and_payload(self, png_data_url, png_bytes):
        image = from_data_url(png_data_url)
        assert image.mime_type == "image/png"
        assert image.size == len(png_bytes)
        assert image.data_url() == png_data_url

    def test_whitespace_in_payload_ignored(self, png_data_url, png_bytes):
        head, payload = png_data_url.split(",", 1)
        wrapped = head + "," + payload[:20] + "\n" + payload[20:]
        assert from_data_url(wrapped).size == len(png_bytes)

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "not a data url",
            "data:image/png;base64",
            "data:image/png,AAAA",
            "data:text/plain;base64,aGVsbG8=",
            "data:image/png;base64,@@@not-base64@@@",
            "data:image/png;base64,",
        ],
    )
    def test_bad_urls_rejected(self, url):
        with pytest.raises(ImageInputError):
            from_data_url(url)


# ===========================================================================
# Reply cleaning
# ===========================================================================


class TestStripCodeFences:

    def test_csv_fence(self):
        assert strip_code_fences("```csv\na,b\n1,2\n```") == "a,b\n1,2"

    def test_plain_fence(self):
        assert strip_code_fences("```\na,b\n```\n") == "a,b"

    def test_no_fence(self):
        assert strip_code_fences("  a,b\n1,2  ") == "a,b\n1,2"

    def test_fences_in_the_middle_removed(self):
        assert strip_code_fences("a,b\n```csv\n1,2\n```") == "a,b\n\n1,2"

    def test_none(self):
        assert strip_code_fences(None) == ""


class TestNoTableMarker:

    @pytest.mark.parametrize("text", ["ERROR", " error \n", '"ERROR"'])
    def test_marker(self, text):
        assert is_no_table_marker(text) is True

    @pytest.mark.parametrize("text", ["", "ERROR,CODE\n1,2", "a,b"])
    def test_not_marker(self, text):
        assert is_no_table_marker(text) is False


# ===========================================================================
# Model call
# ===========================================================================


class TestBuildMessage:

    def test_prompt_then_image(self, png_data_url):
        message = build_message(from_data_url(png_data_url))
        text_part, image_part = message.content
        assert text_part == {"type": "text", "text": EXTRACTION_PROMPT}
        assert image_part == {"type": "image_url", "image_url": png_data_url}

    def test_prompt_rules(self):
        assert "Output ONLY the CSV data" in EXTRACTION_PROMPT
        assert "comma (,)" in EXTRACTION_PROMPT
        assert "merged cells" in EXTRACTION_PROMPT
        assert '"ERROR"' in EXTRACTION_PROMPT


class TestReplyText:

    def test_string(self):
        assert _reply_text("a,b") == "a,b"

    def test_list_of_parts(self):
        parts = [{"type": "text", "text": "a,b\n"}, "1,2", {"type": "image_url", "image_url": "x"}]
        assert _reply_text(parts) == "a,b\n1,2"


class TestExtractCsv:

    def _image(self, png_bytes):
        return from_bytes(png_bytes, "image/png")

    def test_returns_clean_csv(self, png_bytes):
        model = FakeListChatModel(responses=["```csv\nName,Age\nAlice,30\n```"])
        assert extract_csv(self._image(png_bytes), model=model) == "Name,Age\nAlice,30"

    def test_error_reply_means_no_table(self, png_bytes):
        model = FakeListChatModel(responses=["ERROR"])
        with pytest.raises(NoTableFoundError):
            extract_csv(self._image(png_bytes), model=model)

    def test_empty_reply(self, png_bytes):
        model = FakeListChatModel(responses=["```csv\n```"])
        with pytest.raises(ExtractionError, match="empty"):
            extract_csv(self._image(png_bytes), model=model)

    def test_provider_failure_wrapped(self, png_bytes, exploding_model):
        with pytest.raises(ExtractionError, match="API key not valid") as info:
            extract_csv(self._image(png_bytes), model=exploding_model)
        assert isinstance(info.value.__cause__, RuntimeError)
        assert not isinstance(info.value, NoTableFoundError)


class TestBuildModel:

    @pytest.fixture(autouse=True)
    def _fresh_settings(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_MODEL", "gemini-1.5-flash")
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_no_key_anywhere(self):
        with pytest.raises(MissingApiKeyError):
            build_model()

    def test_blank_request_key_falls_back_to_missing(self):
        with pytest.raises(MissingApiKeyError):
            build_model("   ")

    def test_request_key_used(self):
        model = build_model("request-key")
        assert model.google_api_key.get_secret_value() == "request-key"
        assert "gemini-1.5-flash" in model.model

    def test_server_key_used(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "server-key")
        get_settings.cache_clear()
        model = build_model()
        assert model.google_api_key.get_secret_value() == "server-key"


# ===========================================================================
# Result store
# ===========================================================================


class TestResultStore:

    def test_put_get(self):
        store = ResultStore()
        store.put("c1", "a,b")
        assert store.get("c1") == "a,b"
        assert store.get("c2") is None

    def test_last_result_wins(self):
        store = ResultStore()
        store.put("c1", "a")
        store.put("c1", "b")
        assert store.get("c1") == "b"

    def test_clear_one_and_all(self):
        store = ResultStore()
        store.put("c1", "a")
        store.put("c2", "b")
        store.clear("c1")
        assert store.get("c1") is None
        assert store.get("c2") == "b"
        store.clear()
        assert store.get("c2") is None

    def test_oldest_client_evicted_past_capacity(self):
        store = ResultStore(max_clients=2)
        store.put("c1", "a")
        store.put("c2", "b")
        store.put("c3", "c")
        assert len(store) == 2
        assert store.get("c1") is None
        assert store.get("c3") == "c"

    def test_rewrite_refreshes_client(self):
        store = ResultStore(max_clients=2)
        store.put("c1", "a")
        store.put("c2", "b")
        store.put("c1", "a2")
        store.put("c3", "c")
        assert store.get("c1") == "a2"
        assert store.get("c2") is None

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            ResultStore(max_clients=0)
