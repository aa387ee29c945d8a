"""Tests for the preview server."""

from __future__ import annotations

import socket
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from colade.errors import SetupError
from colade.service import create_app, serve_directory
from colade.service.app import port_available, suggest_port


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "docs").mkdir(parents=True)
    (root / "index.html").write_text("<h1>Home</h1>", encoding="utf-8")
    (root / "docs" / "index.html").write_text("<h1>Docs</h1>", encoding="utf-8")
    (root / "docs" / "page.html").write_text("<p>Page</p>", encoding="utf-8")
    (root / "style.css").write_text("body {}", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("outside", encoding="utf-8")
    return root


@pytest.fixture
def client(site_root: Path) -> TestClient:
    return TestClient(create_app(site_root))


def test_root_serves_index(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "<h1>Home</h1>"
    assert response.headers["content-type"].startswith("text/html")


def test_directory_serves_its_index(client: TestClient) -> None:
    assert client.get("/docs/").text == "<h1>Docs</h1>"
    assert client.get("/docs").text == "<h1>Docs</h1>"


def test_files_are_served_with_their_media_type(client: TestClient) -> None:
    response = client.get("/style.css")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/css")
    assert client.get("/docs/page.html").text == "<p>Page</p>"


def test_head_requests_are_supported(client: TestClient) -> None:
    response = client.head("/docs/page.html")
    assert response.status_code == 200
    assert response.text == ""


def test_missing_file_uses_builtin_404(client: TestClient) -> None:
    response = client.get("/nope.html")
    assert response.status_code == 404
    assert "404 - Page Not Found" in response.text


def test_missing_file_uses_site_404_when_present(site_root: Path) -> None:
    (site_root / "404.html").write_text("<p>custom missing page</p>", encoding="utf-8")
    response = TestClient(create_app(site_root)).get("/nope.html")
    assert response.status_code == 404
    assert response.text == "<p>custom missing page</p>"


def test_directory_without_index_is_not_found(site_root: Path) -> None:
    (site_root / "empty").mkdir()
    response = TestClient(create_app(site_root)).get("/empty/")
    assert response.status_code == 404


def test_traversal_outside_root_is_refused(client: TestClient) -> None:
    response = client.get("/%2e%2e/secret.txt")
    assert response.status_code == 404
    assert "outside" not in response.text


def test_serve_directory_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(SetupError):
        serve_directory(tmp_path / "missing", port=0)


def test_busy_port_is_detected_and_an_alternative_suggested() -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
        holder.bind(("127.0.0.1", 0))
        holder.listen(1)
        busy = holder.getsockname()[1]

        assert not port_available(busy)
        alternative = suggest_port(busy)

    assert alternative is None or busy < alternative <= busy + 10


def test_serve_directory_reports_busy_port(site_root: Path) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
        holder.bind(("127.0.0.1", 0))
        holder.listen(1)
        busy = holder.getsockname()[1]

        with pytest.raises(SetupError) as excinfo:
            serve_directory(site_root, port=busy)

    assert f"port {busy} is already in use" in str(excinfo.value)
