"""Unit tests validating routing and handler responses."""

import os
from pathlib import Path

import pytest

from oneshot_http.domain.http_types import HeaderMap, RawRequest
from oneshot_http.handlers import file_handler
from oneshot_http.pipeline.router import route_request


def make_request(
    path: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    body: bytes = b"",
    content_length: int | None = None,
) -> RawRequest:
    """Create a request with sane defaults."""

    return RawRequest(
        method,
        path,
        HeaderMap((headers or {}).items()),
        body,
        "HTTP/1.1",
        content_length,
    )


def test_root_returns_empty_ok(tmp_path: Path) -> None:
    """Root path returns an empty 200 with no content type."""

    response = route_request(make_request("/"), str(tmp_path))
    assert response.status == "200 OK"
    assert response.content_type is None
    assert response.body == b""


@pytest.mark.parametrize("value", ["sample", "", "a%20b?c=d", "nested/path"])
def test_echo_returns_raw_suffix(value: str) -> None:
    """Echo returns the path suffix verbatim as text/plain."""

    response = route_request(make_request(f"/echo/{value}"), "")
    assert response.status == "200 OK"
    assert response.content_type == "text/plain"
    assert response.body == value.encode()


def test_user_agent_reflects_header() -> None:
    """User-agent mirrors the header value."""

    request = make_request("/user-agent", headers={"User-Agent": "foo/1.0"})
    response = route_request(request, "")
    assert response.body == b"foo/1.0"


def test_user_agent_missing_header_is_empty() -> None:
    """A missing header yields an empty body rather than an error."""

    response = route_request(make_request("/user-agent"), "")
    assert response.status == "200 OK"
    assert response.body == b""


def test_unknown_path_is_not_found() -> None:
    """Paths without a route answer 404."""

    assert route_request(make_request("/nope"), "").status == "404 Not Found"
    assert route_request(make_request("/echo"), "").status == "404 Not Found"


@pytest.mark.parametrize("method", ["PUT", "DELETE", "HEAD", "PATCH"])
def test_other_methods_are_not_allowed(method: str) -> None:
    """Only GET and POST are served."""

    response = route_request(make_request("/", method=method), "")
    assert response.status == "405 Method Not Allowed"


def test_other_methods_on_files_are_not_allowed(tmp_path: Path) -> None:
    """A PUT to a file name is refused before the file handler runs."""

    request = make_request(
        "/files/put.txt", method="PUT", body=b"data", content_length=4
    )
    assert route_request(request, str(tmp_path)).status == "405 Method Not Allowed"
    assert not (tmp_path / "put.txt").exists()


def test_post_outside_files_is_not_found(tmp_path: Path) -> None:
    """POST is only meaningful for /files/."""

    request = make_request("/echo/x", method="POST", content_length=0)
    assert route_request(request, str(tmp_path)).status == "404 Not Found"


def test_files_disabled_without_directory() -> None:
    """File routes answer 404 while no directory is configured."""

    assert route_request(make_request("/files/a.txt"), "").status == "404 Not Found"
    request = make_request(
        "/files/a.txt", method="POST", body=b"x", content_length=1
    )
    assert route_request(request, "").status == "404 Not Found"


def test_file_get_returns_contents(tmp_path: Path) -> None:
    """Existing files are returned as application/octet-stream."""

    (tmp_path / "data.bin").write_bytes(b"\x00\x01payload")
    response = route_request(make_request("/files/data.bin"), str(tmp_path))
    assert response.status == "200 OK"
    assert response.content_type == "application/octet-stream"
    assert response.body == b"\x00\x01payload"


def test_file_get_missing_is_not_found(tmp_path: Path) -> None:
    """Absent files answer 404 with no body."""

    response = route_request(make_request("/files/missing.txt"), str(tmp_path))
    assert response.status == "404 Not Found"
    assert response.body == b""


def test_file_get_directory_is_not_found(tmp_path: Path) -> None:
    """Directories are not served as files."""

    (tmp_path / "sub").mkdir()
    response = route_request(make_request("/files/sub"), str(tmp_path))
    assert response.status == "404 Not Found"


def test_file_post_then_get_round_trip(tmp_path: Path) -> None:
    """Posting to /files stores the payload so a later GET returns it."""

    post = make_request(
        "/files/test.txt", method="POST", body=b"hello", content_length=5
    )
    assert route_request(post, str(tmp_path)).status == "201 Created"
    assert (tmp_path / "test.txt").read_bytes() == b"hello"

    response = route_request(make_request("/files/test.txt"), str(tmp_path))
    assert response.status == "200 OK"
    assert response.body == b"hello"


def test_file_post_creates_parent_directories(tmp_path: Path) -> None:
    """Nested names inside the sandbox are created on write."""

    post = make_request(
        "/files/a/b/c.txt", method="POST", body=b"deep", content_length=4
    )
    assert route_request(post, str(tmp_path)).status == "201 Created"
    assert (tmp_path / "a" / "b" / "c.txt").read_bytes() == b"deep"


def test_file_post_without_content_length_is_bad_request(tmp_path: Path) -> None:
    """Uploads must declare their length."""

    post = make_request("/files/x.txt", method="POST", body=b"")
    assert route_request(post, str(tmp_path)).status == "400 Bad Request"
    assert not (tmp_path / "x.txt").exists()


@pytest.mark.parametrize(
    "path", ["/files/../secret", "/files/a/../../secret", "/files/", "/files/a\x00b"]
)
def test_file_traversal_is_forbidden(tmp_path: Path, path: str) -> None:
    """Names escaping the directory are refused."""

    response = route_request(make_request(path), str(tmp_path))
    assert response.status == "403 Forbidden"


def test_file_write_failure_is_internal_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Filesystem errors other than not-found map to 500."""

    def failing_open(*_args, **_kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(file_handler, "open", failing_open, raising=False)
    post = make_request("/files/x.txt", method="POST", body=b"x", content_length=1)
    assert route_request(post, str(tmp_path)).status == "500 Internal Server Error"


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permission bits are not enforced for root",
)
def test_file_read_failure_is_internal_error(tmp_path: Path) -> None:
    """Unreadable files map to 500."""

    target = tmp_path / "locked.txt"
    target.write_bytes(b"x")
    target.chmod(0)
    try:
        response = route_request(make_request("/files/locked.txt"), str(tmp_path))
    finally:
        target.chmod(0o644)
    assert response.status == "500 Internal Server Error"
