"""Tests for the /api/upload endpoints.

Covers submission and its rejections, polling, listing and log export.
TestClient runs background tasks before returning, so an accepted upload has
already finished by the time the next request is made.
"""

import json

from repopush.core.config import settings
from repopush.services.github_client import GitHubAPIError
from tests.conftest import make_job_data
from tests.fakes import make_zip

FILES = {"README.md": b"# demo", "src/main.py": b"print('hi')"}


def _submit(client, job_data=None, archive=None, filename="project.zip", content_type="application/zip"):
    payload = job_data if isinstance(job_data, str) else json.dumps(job_data or make_job_data())
    data = make_zip(FILES) if archive is None else archive
    return client.post(
        "/api/upload",
        files={"archive": (filename, data, content_type)},
        data={"job_data": payload},
    )


class TestSubmit:

    def test_accepted_and_completed(self, client, github):
        resp = _submit(client)
        assert resp.status_code == 202
        body = resp.json()
        assert body["status"] == "pending"
        assert body["message"] == "Upload started"

        job = client.get(f"/api/upload/{body['job_id']}").json()
        assert job["status"] == "completed"
        assert job["progress"] == 100
        assert job["files_processed"] == job["total_files"] == 2
        assert [w["path"] for w in github.writes] == ["README.md", "src/main.py"]

    def test_token_from_job_data_reaches_github(self, client, github):
        _submit(client, make_job_data(github_token="ghp_fromform"))
        assert github.tokens == ["ghp_fromform"]

    def test_zip_detected_by_filename(self, client):
        resp = _submit(client, content_type="application/octet-stream")
        assert resp.status_code == 202

    def test_target_branch_defaults(self, client, github):
        data = make_job_data()
        del data["target_branch"]
        _submit(client, data)
        assert {w["branch"] for w in github.writes} == {settings.default_branch}

    def test_failed_preflight_is_visible_on_job(self, client, github):
        github.repo_error = GitHubAPIError("Bad credentials", 401)
        job_id = _submit(client).json()["job_id"]

        job = client.get(f"/api/upload/{job_id}").json()
        assert job["status"] == "failed"
        assert job["error"] == "GitHub token is invalid or expired"
        assert github.writes == []


class TestSubmitRejections:

    def test_malformed_job_data(self, client):
        resp = _submit(client, job_data="{not json")
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"

    def test_missing_token(self, client):
        data = make_job_data()
        del data["github_token"]
        resp = _submit(client, data)
        assert resp.status_code == 400
        assert resp.json()["details"]["field"] == "github_token"

    def test_bad_repository_url(self, client):
        resp = _submit(client, make_job_data(repository_url="ftp://github.com/octo/demo"))
        assert resp.status_code == 400
        assert resp.json()["details"]["field"] == "repository_url"

    def test_non_zip_file(self, client):
        resp = _submit(client, archive=b"hello", filename="notes.txt", content_type="text/plain")
        assert resp.status_code == 415
        assert resp.json()["error"] == "UNSUPPORTED_ARCHIVE_TYPE"

    def test_oversized_archive(self, client, monkeypatch):
        monkeypatch.setattr(settings, "max_archive_bytes", 16)
        resp = _submit(client)
        assert resp.status_code == 413
        assert resp.json()["error"] == "ARCHIVE_TOO_LARGE"
        assert resp.json()["details"]["limit"] == 16

    def test_empty_archive(self, client):
        resp = _submit(client, archive=b"")
        assert resp.status_code == 400
        assert resp.json()["details"]["field"] == "archive"

    def test_rejections_create_no_job(self, client, github):
        _submit(client, job_data="{}")
        _submit(client, archive=b"hello", filename="notes.txt", content_type="text/plain")
        assert client.get("/api/upload").json() == []
        assert github.calls == []

    def test_corrupt_zip_is_accepted_then_fails(self, client, github):
        resp = _submit(client, archive=b"PK\x03\x04 not really")
        assert resp.status_code == 202

        job = client.get(f"/api/upload/{resp.json()['job_id']}").json()
        assert job["status"] == "failed"
        assert job["error"].startswith("Corrupt archive")
        assert github.calls == []


class TestReadPath:

    def test_unknown_job(self, client):
        resp = client.get("/api/upload/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error"] == "JOB_NOT_FOUND"

    def test_job_shape(self, client):
        job_id = _submit(client, make_job_data(commit_message="Import")).json()["job_id"]
        job = client.get(f"/api/upload/{job_id}").json()

        assert job["id"] == job_id
        assert job["commit_message"] == "Import"
        assert job["current_file"] is None
        assert job["error"] is None
        assert job["logs"][0]["message"] == "Job created"
        assert {"timestamp", "level", "message"} == set(job["logs"][0])

    def test_credentials_never_returned(self, client):
        token = "ghp_secretvalue1234567890abcdef"
        job_id = _submit(client, make_job_data(github_token=token)).json()["job_id"]

        for resp in (client.get(f"/api/upload/{job_id}"), client.get("/api/upload")):
            assert token not in resp.text
            assert "github_token" not in resp.text
            assert "repository_url" not in resp.text

    def test_list_newest_first(self, client):
        first = _submit(client).json()["job_id"]
        second = _submit(client).json()["job_id"]

        jobs = client.get("/api/upload").json()
        assert [j["id"] for j in jobs] == [second, first]


class TestLogExport:

    def test_plain_text_attachment(self, client):
        job_id = _submit(client).json()["job_id"]
        job = client.get(f"/api/upload/{job_id}").json()

        resp = client.get(f"/api/upload/{job_id}/logs")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert f'filename="upload-{job_id}.log"' in resp.headers["content-disposition"]

        lines = resp.text.splitlines()
        assert len(lines) == len(job["logs"])
        assert lines[0].endswith("[INFO] Job created")
        assert resp.text.endswith("\n")

    def test_error_lines_marked(self, client, github):
        github.fail_paths = {"src/main.py": "Invalid request"}
        job_id = _submit(client).json()["job_id"]

        text = client.get(f"/api/upload/{job_id}/logs").text
        assert "[ERROR] Error for src/main.py: Invalid request" in text

    def test_unknown_job(self, client):
        resp = client.get("/api/upload/nope/logs")
        assert resp.status_code == 404
