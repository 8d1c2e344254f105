"""HTTP-level tests against the FastAPI app with an in-memory frame catalog."""
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.config.settings import settings
from app.domain import frame_service as frame_service_module
from app.infrastructure.database.catalog import FrameCatalog
from app.main import app

API = settings.API_V1_STR
AUTH = (settings.BASIC_AUTH_USERNAME, settings.BASIC_AUTH_PASSWORD)


@pytest.fixture
def client(template):
    app.state.catalog = FrameCatalog(templates=[template])
    with TestClient(app) as c:
        yield c
    app.state.catalog = None


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_frames(client):
    response = client.get(f"{API}/frames")

    assert response.status_code == 200
    frames = response.json()
    assert [f["id"] for f in frames] == ["classic"]
    assert frames[0]["top"] == 50


def test_render_box_at_breakpoint_is_canonical(client):
    response = client.get(f"{API}/frames/classic/render-box", params={"available_width": 1230})

    body = response.json()
    assert body["scale"] == 1.0
    assert body["width"] == 512
    assert body["crop_viewport"] == 512
    assert body["text_offsets"] == {"top": 50, "right": 20}


def test_render_box_compact(client):
    response = client.get(f"{API}/frames/classic/render-box",
                          params={"available_width": 1000, "position": "bottom-left"})

    body = response.json()
    assert body["width"] == pytest.approx(500)
    assert body["crop_viewport"] == pytest.approx(500)
    assert set(body["text_offsets"]) == {"bottom", "left"}


def test_render_box_unknown_frame(client):
    response = client.get(f"{API}/frames/nope/render-box", params={"available_width": 1000})

    assert response.status_code == 404


def test_resolve_crop(client):
    response = client.post(f"{API}/crop/resolve", json={
        "selection": {"zoom": 2},
        "natural_size": {"width": 600, "height": 400},
    })

    assert response.status_code == 200
    assert response.json() == {"x": 200, "y": 100, "width": 200, "height": 200}


def test_resolve_crop_centers_non_finite_pan(client):
    response = client.post(
        f"{API}/crop/resolve",
        content='{"selection": {"offset_x": NaN, "zoom": 1}, "natural_size": {"width": 600, "height": 400}}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200
    assert response.json() == {"x": 100, "y": 0, "width": 400, "height": 400}


def test_resolve_crop_rejects_zoom_below_one(client):
    response = client.post(f"{API}/crop/resolve", json={
        "selection": {"zoom": 0.5},
        "natural_size": {"width": 600, "height": 400},
    })

    assert response.status_code == 422
    assert response.json()["error_type"] == "InvalidCrop"


def test_resolve_crop_without_photo(client):
    response = client.post(f"{API}/crop/resolve", json={"selection": {"zoom": 1}})

    assert response.status_code == 400
    assert response.json()["error_type"] == "MissingSource"


def test_measure_text(client):
    response = client.post(f"{API}/text/measure", json={"primary_text": "Jane", "secondary_text": "Doe"})

    assert response.json() == {"width": 200, "height": 80}


def test_fit_text_not_ready(client):
    response = client.post(f"{API}/text/fit", json={"measured_width": 0, "measured_height": 80,
                                                   "max_width": 472, "max_height": 412})

    assert response.status_code == 409
    assert response.json()["error_type"] == "MeasurementNotReady"


def test_fit_text(client):
    response = client.post(f"{API}/text/fit", json={"measured_width": 200, "measured_height": 80,
                                                   "max_width": 120, "max_height": 60})

    assert response.json() == pytest.approx({"width": 120, "height": 48})


def test_export_requires_auth(client, photo_data_url):
    response = client.post(f"{API}/export", json={"uploaded_image": photo_data_url})

    assert response.status_code == 401


def test_export_downloads_image(client, photo_data_url):
    response = client.post(f"{API}/export", auth=AUTH, json={
        "frame_id": "classic",
        "uploaded_image": photo_data_url,
        "crop": {"offset_x": 0.1, "zoom": 1.5},
        "primary_text": "Jane Doe",
        "secondary_text": "Volunteer",
        "position": "bottom-right",
        "greyscale": True,
    })

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert 'filename="profile-frame.png"' in response.headers["content-disposition"]
    out = Image.open(io.BytesIO(response.content)).convert("RGB")
    assert out.size == (512, 512)
    r, g, b = out.getpixel((256, 120))
    assert r == g == b


def test_export_without_photo(client):
    response = client.post(f"{API}/export", auth=AUTH, json={"frame_id": "classic"})

    assert response.status_code == 400
    assert response.json()["message"] == "no source image"


def test_export_unknown_frame(client, photo_data_url):
    response = client.post(f"{API}/export", auth=AUTH, json={"frame_id": "nope", "uploaded_image": photo_data_url})

    assert response.status_code == 404


def test_export_rejects_bad_zoom(client, photo_data_url):
    response = client.post(f"{API}/export", auth=AUTH, json={
        "uploaded_image": photo_data_url,
        "crop": {"zoom": 0.5},
    })

    assert response.status_code == 422
    assert response.json()["error_type"] == "InvalidCrop"


def test_export_upload(client, photo_data_url, monkeypatch):
    monkeypatch.setattr(frame_service_module, "upload_composite",
                        lambda result, public_id: f"https://cdn.example/{public_id}.{result.extension}")

    response = client.post(f"{API}/export", auth=AUTH, json={"uploaded_image": photo_data_url, "upload": True})

    assert response.status_code == 200
    body = response.json()
    assert body["url"].startswith("https://cdn.example/profile-frame-")
    assert body["filename"] == "profile-frame.png"
