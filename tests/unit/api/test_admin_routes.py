"""Admin surface: login, upload, delete, archive, unarchive."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from pdf_vault.exceptions import StorageWriteError
from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD, PDF_BYTES, UPLOAD_LIMIT


def pdf_file(data: bytes = PDF_BYTES, name: str = "report.pdf"):
    return {"pdf": (name, data, "application/pdf")}


async def upload(client, headers, *, title="Quarterly report", data=PDF_BYTES, **form):
    return await client.post(
        "/api/admin/upload",
        headers=headers,
        files=pdf_file(data),
        data={"title": title, **form},
    )


@pytest.mark.asyncio
class TestLogin:
    async def test_login_returns_working_token(self, client, auth_gate):
        resp = await client.post("/api/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})

        assert resp.status_code == 200
        token = resp.json()["token"]
        assert auth_gate.verify_token(token)["role"] == "admin"

    async def test_wrong_password(self, client):
        resp = await client.post("/api/admin/login", json={"email": ADMIN_EMAIL, "password": "nope"})

        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}

    async def test_missing_fields(self, client):
        resp = await client.post("/api/admin/login", json={})

        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}

    async def test_malformed_body(self, client):
        resp = await client.post("/api/admin/login", json=["not", "an", "object"])

        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Invalid request")


@pytest.mark.asyncio
class TestAdminGuard:
    async def test_missing_header(self, client, blob_store):
        resp = await upload(client, {})

        assert resp.status_code == 401
        assert resp.json() == {"error": "Missing Authorization header"}
        assert len(blob_store) == 0

    async def test_bad_token(self, client):
        resp = await client.delete("/api/admin/some-id", headers={"Authorization": "Bearer garbage"})

        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid token"}

    async def test_expired_token(self, client, auth_gate):
        issued = datetime.now(timezone.utc) - timedelta(hours=13)
        token = auth_gate.issue_token(ADMIN_EMAIL, ADMIN_PASSWORD, now=issued)

        resp = await upload(client, {"Authorization": f"Bearer {token}"})

        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid token"}

    @pytest.mark.parametrize("path", ["/api/admin/x/archive", "/api/admin/x/unarchive"])
    async def test_archive_routes_are_guarded(self, client, path):
        resp = await client.patch(path)

        assert resp.status_code == 401


@pytest.mark.asyncio
class TestUpload:
    async def test_upload(self, client, admin_headers, blob_store):
        resp = await upload(client, admin_headers, description="Q3 numbers")

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Uploaded"
        pdf = body["pdf"]
        assert pdf["title"] == "Quarterly report"
        assert pdf["description"] == "Q3 numbers"
        assert pdf["filename"] == "report.pdf"
        assert pdf["contentType"] == "application/pdf"
        assert pdf["views"] == 0 and pdf["downloads"] == 0
        assert pdf["archived"] is False
        assert pdf["blobRef"] in blob_store

    async def test_missing_title(self, client, admin_headers, blob_store, catalog):
        resp = await upload(client, admin_headers, title="")

        assert resp.status_code == 400
        assert resp.json() == {"error": "Title is required"}
        assert len(blob_store) == 0
        assert len(catalog) == 0

    async def test_missing_file(self, client, admin_headers):
        resp = await client.post("/api/admin/upload", headers=admin_headers, data={"title": "Report"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "No file uploaded"}

    async def test_file_over_limit(self, client, admin_headers, blob_store, catalog):
        resp = await upload(client, admin_headers, data=b"x" * (UPLOAD_LIMIT + 1))

        assert resp.status_code == 413
        assert resp.json() == {"error": f"File exceeds the {UPLOAD_LIMIT} byte upload limit"}
        assert len(blob_store) == 0
        assert len(catalog) == 0

    async def test_file_at_limit(self, client, admin_headers):
        resp = await upload(client, admin_headers, data=b"x" * UPLOAD_LIMIT)

        assert resp.status_code == 200

    async def test_request_body_over_hard_limit(self, client, admin_headers, blob_store):
        resp = await upload(client, admin_headers, data=b"x" * (UPLOAD_LIMIT + 2 * 1024 * 1024))

        assert resp.status_code == 413
        assert resp.json() == {"error": "Request body exceeds allowed size"}
        assert len(blob_store) == 0

    async def test_storage_failure_is_generic_500(self, client, admin_headers, blob_store, catalog, mocker):
        mocker.patch.object(blob_store, "ingest", side_effect=StorageWriteError("gridfs exploded"))

        resp = await upload(client, admin_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Server error"}
        assert len(catalog) == 0

    async def test_catalog_failure_leaves_no_orphan(self, client, admin_headers, blob_store, catalog, mocker):
        mocker.patch.object(catalog, "create", side_effect=RuntimeError("mongo down"))

        resp = await upload(client, admin_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Server error"}
        assert len(blob_store) == 0


@pytest.mark.asyncio
class TestManage:
    async def test_delete(self, client, admin_headers, blob_store):
        pdf = (await upload(client, admin_headers)).json()["pdf"]

        resp = await client.delete(f"/api/admin/{pdf['id']}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json() == {"message": "Deleted"}
        assert pdf["blobRef"] not in blob_store
        assert (await client.get("/api/public/list")).json() == []

        again = await client.delete(f"/api/admin/{pdf['id']}", headers=admin_headers)
        assert again.status_code == 404
        assert again.json() == {"error": "Not found"}

    async def test_archive_and_unarchive(self, client, admin_headers):
        pdf = (await upload(client, admin_headers)).json()["pdf"]

        archived = await client.patch(f"/api/admin/{pdf['id']}/archive", headers=admin_headers)
        assert archived.status_code == 200
        assert archived.json()["message"] == "Archived"
        assert archived.json()["pdf"]["archived"] is True

        restored = await client.patch(f"/api/admin/{pdf['id']}/unarchive", headers=admin_headers)
        assert restored.json()["message"] == "Unarchived"
        assert restored.json()["pdf"]["archived"] is False

    async def test_archive_missing(self, client, admin_headers):
        resp = await client.patch("/api/admin/not-an-id/archive", headers=admin_headers)

        assert resp.status_code == 404
        assert resp.json() == {"error": "Not found"}
