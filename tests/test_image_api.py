"""HTTP tests for /api/image: admin-only upload, pagination and owner-checked delete (hosting service mocked)."""

import unittest
from datetime import datetime
from unittest.mock import AsyncMock, patch

from app.core.config import get_settings
from app.models import Image
from app.services.cloud_storage import CloudStorageError, UploadedImage
from tests.support import ApiTestCase

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestUploadImage(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.create_user(username="root", email="root@x.com", role="admin")
        self.user = self.create_user(username="al", email="al@x.com", role="user")

    def _upload(self, user=None, files=None):
        headers = self.auth_headers(user) if user is not None else {}
        if files is None:
            files = {"image": ("cat.png", PNG_BYTES, "image/png")}
        return self.client.post("/api/image/upload", files=files, headers=headers)

    @patch("app.services.cloud_storage.upload_image", new_callable=AsyncMock)
    def test_admin_upload_persists_image(self, mock_upload: AsyncMock) -> None:
        mock_upload.return_value = UploadedImage(
            url="https://res.cloudinary.com/demo/image/upload/v1/abc.png",
            public_id="abc",
        )
        resp = self._upload(self.admin)
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["image"]["publicId"], "abc")
        self.assertEqual(body["image"]["uploadedBy"], self.admin.id)
        self.assertTrue(body["image"]["url"].endswith("abc.png"))

        args = mock_upload.await_args.args
        self.assertEqual(args[0], PNG_BYTES)
        self.assertEqual(args[1], "cat.png")
        self.assertEqual(args[2], "image/png")
        with self.SessionTesting() as db:
            stored = db.query(Image).one()
            self.assertEqual(stored.public_id, "abc")
            self.assertEqual(stored.uploaded_by, self.admin.id)

    @patch("app.services.cloud_storage.upload_image", new_callable=AsyncMock)
    def test_non_admin_is_forbidden(self, mock_upload: AsyncMock) -> None:
        resp = self._upload(self.user)
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(resp.json()["success"])
        mock_upload.assert_not_awaited()

    @patch("app.services.cloud_storage.upload_image", new_callable=AsyncMock)
    def test_authentication_runs_before_role_check(self, mock_upload: AsyncMock) -> None:
        resp = self._upload(None)
        self.assertEqual(resp.status_code, 401)
        mock_upload.assert_not_awaited()

    @patch("app.services.cloud_storage.upload_image", new_callable=AsyncMock)
    def test_missing_file(self, mock_upload: AsyncMock) -> None:
        resp = self.client.post(
            "/api/image/upload",
            data={"note": "no file"},
            headers=self.auth_headers(self.admin),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("File is required", resp.json()["message"])
        mock_upload.assert_not_awaited()

    @patch("app.services.cloud_storage.upload_image", new_callable=AsyncMock)
    def test_non_image_rejected(self, mock_upload: AsyncMock) -> None:
        resp = self._upload(
            self.admin,
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Only images", resp.json()["message"])
        mock_upload.assert_not_awaited()

    @patch("app.services.cloud_storage.upload_image", new_callable=AsyncMock)
    def test_oversized_file_rejected(self, mock_upload: AsyncMock) -> None:
        small_limit = get_settings().model_copy(update={"UPLOAD_MAX_BYTES": 16})
        with patch("app.api.image.get_settings", return_value=small_limit):
            resp = self._upload(self.admin)
        self.assertEqual(resp.status_code, 400)
        mock_upload.assert_not_awaited()

    @patch("app.services.cloud_storage.upload_image", new_callable=AsyncMock)
    def test_hosting_failure_is_internal_error(self, mock_upload: AsyncMock) -> None:
        mock_upload.side_effect = CloudStorageError("Cloudinary is unreachable.")
        resp = self._upload(self.admin)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["message"], "Something went wrong! Please try again.")
        with self.SessionTesting() as db:
            self.assertEqual(db.query(Image).count(), 0)


class TestListImages(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.create_user()
        self.images = [
            self.create_image(
                self.user,
                public_id=f"img-{i}",
                created_at=datetime(2026, 1, i + 1, 12, 0, 0),
            )
            for i in range(7)
        ]

    def _get(self, **params):
        return self.client.get("/api/image/get", params=params, headers=self.auth_headers(self.user))

    def test_defaults_newest_first_five_per_page(self) -> None:
        resp = self._get()
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["currentPage"], 1)
        self.assertEqual(body["totalImages"], 7)
        self.assertEqual(body["totalPages"], 2)
        self.assertEqual([d["publicId"] for d in body["data"]], ["img-6", "img-5", "img-4", "img-3", "img-2"])

    def test_pagination_math(self) -> None:
        body = self._get(page=3, limit=3, sortOrder="asc").json()
        self.assertEqual(body["totalPages"], 3)
        self.assertEqual(body["currentPage"], 3)
        self.assertEqual([d["publicId"] for d in body["data"]], ["img-6"])

    def test_page_past_the_end_is_empty(self) -> None:
        body = self._get(page=10, limit=5).json()
        self.assertEqual(body["data"], [])
        self.assertEqual(body["totalImages"], 7)

    def test_sort_by_public_id(self) -> None:
        body = self._get(sortBy="publicId", sortOrder="asc", limit=2).json()
        self.assertEqual([d["publicId"] for d in body["data"]], ["img-0", "img-1"])

    def test_invalid_query_is_invalid_input(self) -> None:
        for params in ({"page": 0}, {"limit": 0}, {"limit": 101}, {"sortBy": "password"}, {"sortOrder": "up"}):
            with self.subTest(params=params):
                resp = self._get(**params)
                self.assertEqual(resp.status_code, 400)
                self.assertFalse(resp.json()["success"])

    def test_requires_token(self) -> None:
        resp = self.client.get("/api/image/get")
        self.assertEqual(resp.status_code, 401)


class TestDeleteImage(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.owner = self.create_user(username="a", email="a@x.com", role="admin")
        self.other = self.create_user(username="b", email="b@x.com", role="admin")
        self.image = self.create_image(self.owner, public_id="owned-by-a")

    def _delete(self, user, image_id=None):
        image_id = self.image.id if image_id is None else image_id
        return self.client.delete(f"/api/image/{image_id}", headers=self.auth_headers(user))

    @patch("app.services.cloud_storage.delete_image", new_callable=AsyncMock)
    def test_non_owner_is_forbidden(self, mock_delete: AsyncMock) -> None:
        resp = self._delete(self.other)
        self.assertEqual(resp.status_code, 403)
        mock_delete.assert_not_awaited()
        with self.SessionTesting() as db:
            self.assertIsNotNone(db.get(Image, self.image.id))

    @patch("app.services.cloud_storage.delete_image", new_callable=AsyncMock)
    def test_owner_deletes_and_listing_no_longer_shows_it(self, mock_delete: AsyncMock) -> None:
        mock_delete.return_value = True
        resp = self._delete(self.owner)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["success"])
        self.assertEqual(mock_delete.await_args.args[0], "owned-by-a")

        listing = self.client.get("/api/image/get", headers=self.auth_headers(self.owner)).json()
        self.assertEqual(listing["totalImages"], 0)
        self.assertEqual(listing["data"], [])

    @patch("app.services.cloud_storage.delete_image", new_callable=AsyncMock)
    def test_missing_image_is_not_found(self, mock_delete: AsyncMock) -> None:
        resp = self._delete(self.owner, image_id=9999)
        self.assertEqual(resp.status_code, 404)
        mock_delete.assert_not_awaited()

    @patch("app.services.cloud_storage.delete_image", new_callable=AsyncMock)
    def test_hosting_failure_keeps_record(self, mock_delete: AsyncMock) -> None:
        mock_delete.side_effect = CloudStorageError("Cloudinary returned status 500.", status_code=500)
        resp = self._delete(self.owner)
        self.assertEqual(resp.status_code, 500)
        with self.SessionTesting() as db:
            self.assertIsNotNone(db.get(Image, self.image.id))

    def test_non_integer_id_is_invalid_input(self) -> None:
        resp = self.client.delete("/api/image/abc", headers=self.auth_headers(self.owner))
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
