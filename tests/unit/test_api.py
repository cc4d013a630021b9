"""
API tests for the product image endpoints.

Dependencies are swapped through FastAPI's dependency_overrides, so each
test gets its own settings, repository and image store.
"""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_product_repository,
    get_remote_store,
)
from src.config.settings import Settings, get_settings
from src.core.images.models import ProductImageState
from src.infrastructure.products.repository import InMemoryProductRepository
from src.infrastructure.storage.client import MockImageStore
from src.main import create_app


API_KEY = "test-key"
HEADERS = {"X-API-Key": API_KEY}
DEFAULT_IMAGE = "/images/default-product.png"
BASE_URL = "https://cdn.example.com"


def build_client(
    settings: Settings,
    store: Optional[MockImageStore],
    repository: InMemoryProductRepository,
) -> TestClient:
    app = create_app()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_remote_store] = lambda: store
    app.dependency_overrides[get_product_repository] = lambda: repository

    return TestClient(app)


@pytest.fixture
def store() -> MockImageStore:
    return MockImageStore()


@pytest.fixture
def repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def remote_client(tmp_path, store, repository) -> TestClient:
    """Client with the mock S3 store enabled."""
    settings = Settings(
        _env_file=None,
        api_keys=API_KEY,
        default_image_path=DEFAULT_IMAGE,
        local_upload_root=str(tmp_path),
        aws_s3_url=BASE_URL,
        s3_mock_mode=True,
    )
    return build_client(settings, store, repository)


@pytest.fixture
def local_client(tmp_path, repository) -> TestClient:
    """Client without remote credentials: uploads go to disk."""
    settings = Settings(
        _env_file=None,
        api_keys=API_KEY,
        default_image_path=DEFAULT_IMAGE,
        local_upload_root=str(tmp_path),
    )
    return build_client(settings, None, repository)


def upload(client: TestClient, product_id: int, filename: str = "logo.png", company_id: int = 7):
    return client.post(
        f"/api/v1/products/{product_id}/image",
        data={"company_id": str(company_id), "use_default_image": "false"},
        files={"image": (filename, b"image-bytes", "image/png")},
        headers=HEADERS,
    )


class TestAuthentication:
    """Tests for the API key requirement."""

    def test_missing_key_is_forbidden(self, local_client):
        response = local_client.get("/api/v1/products/1/image")

        assert response.status_code == 403

    def test_invalid_key_is_forbidden(self, local_client):
        response = local_client.get(
            "/api/v1/products/1/image", headers={"X-API-Key": "wrong"}
        )

        assert response.status_code == 403


class TestLocalUploads:
    """Tests for uploads without remote storage."""

    def test_upload_writes_to_disk(self, local_client, tmp_path):
        response = upload(local_client, product_id=1)

        assert response.status_code == 200
        body = response.json()
        assert body["stored_reference"] == "/uploads/companies/7/images/logo.png"
        assert body["using_default_image"] is False
        assert (tmp_path / "uploads" / "companies" / "7" / "images" / "logo.png").exists()

    def test_local_image_resolves_to_default_path(self, local_client):
        """Without credentials the public path is always the default image."""
        upload(local_client, product_id=1)

        response = local_client.get("/api/v1/products/1/image", headers=HEADERS)

        assert response.json()["image_path"] == DEFAULT_IMAGE

    def test_crafted_filename_stays_in_company_directory(self, local_client, tmp_path):
        response = upload(local_client, product_id=1, filename="../../../escaped.png")

        assert response.status_code == 200
        assert response.json()["stored_reference"] == "/uploads/companies/7/images/escaped.png"
        assert (tmp_path / "uploads" / "companies" / "7" / "images" / "escaped.png").exists()
        assert not (tmp_path.parent / "escaped.png").exists()

    def test_existing_product_without_company_takes_submitted_company(
        self, local_client, repository
    ):
        repository.save(ProductImageState(product_id=2, image_path=DEFAULT_IMAGE))

        response = upload(local_client, product_id=2, company_id=7)

        body = response.json()
        assert body["company_id"] == 7
        assert body["stored_reference"] == "/uploads/companies/7/images/logo.png"
        assert repository.get(2).company_id == 7

    def test_unknown_product_is_not_found(self, local_client):
        response = local_client.get("/api/v1/products/99/image", headers=HEADERS)

        assert response.status_code == 404


class TestRemoteUploads:
    """Tests for uploads through the mock S3 store."""

    def test_upload_resolves_to_remote_url(self, remote_client, store):
        response = upload(remote_client, product_id=1)

        body = response.json()
        assert body["stored_reference"] == "uploads/companies/7/images/logo.png"
        assert body["image_path"] == f"{BASE_URL}/uploads/companies/7/images/logo.png"
        assert store.keys() == ["uploads/companies/7/images/logo.png"]

    def test_unreachable_store_serves_default(self, remote_client, store):
        upload(remote_client, product_id=1)
        store.available = False

        response = remote_client.get("/api/v1/products/1/image", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["image_path"] == DEFAULT_IMAGE

    def test_switching_to_default_deletes_remote_image(self, remote_client, store):
        upload(remote_client, product_id=1)

        response = remote_client.post(
            "/api/v1/products/1/image",
            data={"use_default_image": "true"},
            headers=HEADERS,
        )

        assert response.json()["using_default_image"] is True
        assert store.keys() == []

    def test_delete_endpoint_resets_to_default(self, remote_client, store):
        upload(remote_client, product_id=1)

        response = remote_client.delete("/api/v1/products/1/image", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["image_path"] == DEFAULT_IMAGE
        assert store.keys() == []

    def test_other_company_cannot_change_image(self, remote_client):
        upload(remote_client, product_id=1, company_id=7)

        response = upload(remote_client, product_id=1, company_id=8)

        assert response.status_code == 403


class TestImageChoice:
    """Tests for contradictory image choices."""

    def test_default_with_upload_is_rejected(self, local_client):
        response = local_client.post(
            "/api/v1/products/1/image",
            data={"company_id": "7", "use_default_image": "true"},
            files={"image": ("logo.png", b"image-bytes", "image/png")},
            headers=HEADERS,
        )

        assert response.status_code == 422
        assert "provided one anyway" in response.json()["detail"][0]

    def test_opting_out_without_image_is_rejected(self, local_client):
        response = local_client.post(
            "/api/v1/products/1/image",
            data={"company_id": "7", "use_default_image": "false"},
            headers=HEADERS,
        )

        assert response.status_code == 422


class TestHealth:
    """Tests for health endpoints."""

    def test_liveness(self, local_client):
        response = local_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness_without_remote_storage(self, local_client):
        response = local_client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

        remote_check = next(
            c for c in response.json()["checks"] if c["name"] == "remote_storage"
        )
        assert remote_check["status"] == "ok"
        assert remote_check["error"] is None
        assert remote_check["detail"] == "not configured, using local disk"
