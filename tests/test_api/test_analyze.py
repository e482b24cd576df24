"""Tests for analysis endpoints."""

import pytest
from fastapi.testclient import TestClient

SERVICE_CODE = '''package service

func Name(u *pb.User) string {
	return u.Profile.Email
}
'''


@pytest.fixture
def client():
    from protogetter.main import app
    with TestClient(app) as client:
        yield client


@pytest.fixture
def files(sample_go_generated):
    return {"pb/user.pb.go": sample_go_generated, "service/service.go": SERVICE_CODE}


class TestAnalyzeEndpoint:
    """Test POST /api/analyze."""

    def test_standalone_diagnostics(self, client, files):
        response = client.post("/api/analyze", json={"files": files})

        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "standalone"
        assert data["files_analyzed"] == 1
        assert data["files_generated"] == 1
        assert data["issues"] == []
        [diagnostic] = data["diagnostics"]
        assert diagnostic["filename"] == "service/service.go"
        assert diagnostic["line"] == 4
        assert diagnostic["column"] == 9
        assert diagnostic["message"] == (
            'avoid direct access to proto field "u.Profile.Email" use "u.GetProfile().GetEmail()"'
        )
        edit = diagnostic["suggested_fixes"][0]["text_edits"][0]
        assert edit["new_text"] == "u.GetProfile().GetEmail()"
        assert SERVICE_CODE.encode()[edit["pos"]:edit["end"]] == b"u.Profile.Email"

    def test_aggregator_issues(self, client, files):
        response = client.post("/api/analyze", json={"files": files, "mode": "aggregator"})

        assert response.status_code == 200
        data = response.json()
        assert data["diagnostics"] == []
        [issue] = data["issues"]
        assert issue["pos"] == {"filename": "service/service.go", "offset": 56, "line": 4, "column": 9}
        assert issue["inline_fix"] == {
            "start_col": 8,
            "length": len("u.Profile.Email"),
            "new_string": "u.GetProfile().GetEmail()",
        }

    def test_empty_files_rejected(self, client):
        response = client.post("/api/analyze", json={"files": {}})

        assert response.status_code == 400

    def test_invalid_mode_rejected(self, client, files):
        response = client.post("/api/analyze", json={"files": files, "mode": "batch"})

        assert response.status_code == 422


class TestFixEndpoint:
    """Test POST /api/fix."""

    def test_fix_rewrites_sources(self, client, files, sample_go_generated):
        response = client.post("/api/fix", json={"files": files})

        assert response.status_code == 200
        data = response.json()
        assert data["fixes_applied"] == 1
        assert "return u.GetProfile().GetEmail()" in data["files"]["service/service.go"]
        assert data["files"]["pb/user.pb.go"] == sample_go_generated

    def test_fix_output_is_clean(self, client, files):
        fixed = client.post("/api/fix", json={"files": files}).json()["files"]

        data = client.post("/api/analyze", json={"files": fixed}).json()

        assert data["diagnostics"] == []

    def test_empty_files_rejected(self, client):
        response = client.post("/api/fix", json={"files": {}})

        assert response.status_code == 400
