"""Integration tests for the cutout HTTP API."""
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.errors import ExternalServiceError
from app.main import app
from app.vision_client import get_segmentation_client

from conftest import model_response, png_data_uri


class FakeSegmentationClient:
    """Returns a canned model response instead of calling Gemini."""

    model_name = "fake-model"
    configured = True

    def __init__(self, response_text="", error=None):
        self.response_text = response_text
        self.error = error
        self.images = []

    async def segment(self, image_bytes, mime_type="image/jpeg"):
        self.images.append((image_bytes, mime_type))
        if self.error is not None:
            raise self.error
        return self.response_text


@pytest.fixture
def fake_model():
    fake = FakeSegmentationClient()
    app.dependency_overrides[get_segmentation_client] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(fake_model):
    return TestClient(app)


def upload(photo_bytes, filename="photo.png", content_type="image/png"):
    return {"file": (filename, photo_bytes, content_type)}


class TestSegmentEndpoint:
    """Test POST /api/v1/segment."""

    def test_returns_png_cutout(self, client, fake_model, photo_bytes, centered_response):
        fake_model.response_text = centered_response

        response = client.post("/api/v1/segment", files=upload(photo_bytes))

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["content-length"] == str(len(response.content))
        assert response.headers["x-cutout-box"] == "100,100,300,300"
        assert response.headers["x-cutout-label"] == "subject"

        image = Image.open(io.BytesIO(response.content))
        assert image.mode == "RGBA"
        assert image.size == (200, 200)

    def test_label_header_is_reduced_to_printable_ascii(self, client, fake_model, photo_bytes, full_mask_png):
        fake_model.response_text = model_response(
            [250, 250, 750, 750], png_data_uri(full_mask_png), label="cat\r\nSet-Cookie: x=1"
        )

        response = client.post("/api/v1/segment", files=upload(photo_bytes))

        assert response.status_code == 200
        assert response.headers["x-cutout-label"] == "cat??Set-Cookie: x=1"
        assert "set-cookie" not in response.headers

    def test_unprintable_label_is_omitted(self, client, fake_model, photo_bytes, full_mask_png):
        fake_model.response_text = model_response(
            [250, 250, 750, 750], png_data_uri(full_mask_png), label="\u732b\n"
        )

        response = client.post("/api/v1/segment", files=upload(photo_bytes))

        assert response.status_code == 200
        assert "x-cutout-label" not in response.headers

    def test_model_receives_jpeg_of_resized_photo(self, client, fake_model, photo_bytes, centered_response):
        fake_model.response_text = centered_response

        client.post("/api/v1/segment", files=upload(photo_bytes))

        image_bytes, mime_type = fake_model.images[0]
        assert mime_type == "image/jpeg"
        assert Image.open(io.BytesIO(image_bytes)).format == "JPEG"

    def test_missing_file_is_bad_request(self, client):
        response = client.post("/api/v1/segment", data={"note": "no file"})

        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}

    def test_empty_file_is_bad_request(self, client):
        response = client.post("/api/v1/segment", files=upload(b""))

        assert response.status_code == 400
        assert "error" in response.json()

    def test_oversized_upload_is_rejected(self, client, photo_bytes, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "100")

        response = client.post("/api/v1/segment", files=upload(photo_bytes))

        assert response.status_code == 413
        assert "error" in response.json()

    def test_invalid_image_is_server_error(self, client, fake_model):
        response = client.post("/api/v1/segment", files=upload(b"not an image"))

        assert response.status_code == 500
        assert response.json() == {"error": "Uploaded file is not a valid image"}
        assert fake_model.images == []

    def test_unparseable_model_text_is_server_error(self, client, fake_model, photo_bytes):
        fake_model.response_text = "secret-debug-text without any segmentation"

        response = client.post("/api/v1/segment", files=upload(photo_bytes))

        assert response.status_code == 500
        body = response.json()
        assert set(body) == {"error"}
        assert "secret-debug-text" not in body["error"]

    def test_model_failure_is_server_error(self, client, fake_model, photo_bytes):
        fake_model.error = ExternalServiceError("Segmentation model request failed")

        response = client.post("/api/v1/segment", files=upload(photo_bytes))

        assert response.status_code == 500
        assert response.json() == {"error": "Segmentation model request failed"}


class TestServiceEndpoints:
    """Test health and root endpoints."""

    def test_health_reports_model_and_pipeline(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["model"] == "fake-model"
        assert body["api_key_configured"] is True
        assert body["pipeline"]["max_dimension"] == 1024
        assert body["pipeline"]["mask_threshold"] == 50.0

    def test_root_lists_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["segment"] == "/api/v1/segment"
