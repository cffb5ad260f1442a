"""Unit tests for GitHubChangeSource and tag rendering."""

from __future__ import annotations

from typing import Any

import pytest
import requests

from imagesmith.sources import ChangeSource, ChangeSourceError, render_tag
from imagesmith.sources.github import GitHubChangeSource


class _Resp:
    def __init__(self, status_code: int, payload: Any = None, headers: dict[str, str] | None = None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = str(payload)

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _Session:
    """Maps URL suffixes to canned responses and records requests."""

    def __init__(self, routes: dict[str, _Resp] | None = None, exc: Exception | None = None):
        self.routes = routes or {}
        self.exc = exc
        self.requests: list[tuple[str, dict[str, str], dict[str, Any] | None]] = []

    def get(self, url, headers, params=None, timeout=None):
        self.requests.append((url, headers, params))
        if self.exc:
            raise self.exc
        for suffix, resp in self.routes.items():
            if url.endswith(suffix):
                return resp
        return _Resp(404, {"message": "Not Found"})


def _source(session: _Session, repos: list[str], **kwargs: Any) -> GitHubChangeSource:
    return GitHubChangeSource(
        repos,
        kwargs.pop("tag_template", "{owner}/{name}:{short_commit}"),
        api_url="https://api.test",
        session=session,
        **kwargs,
    )


class TestRenderTag:
    def test_fields(self):
        tag = render_tag(
            "{registry}/{owner}/{name}:{commit}", "Octo", "App", "abc", registry="reg.io"
        )
        assert tag == "reg.io/octo/app:abc"

    def test_short_commit(self):
        assert render_tag("{name}:{short_commit}", "o", "n", "0123456789abcdef") == "n:0123456789ab"


class TestListWatched:
    def test_one_candidate_per_repository(self):
        session = _Session({
            "/repos/octo/app/commits": _Resp(200, [{"sha": "aaa111"}]),
            "/repos/octo/api/commits": _Resp(200, [{"sha": "bbb222"}]),
        })
        candidates = _source(session, ["octo/app", "octo/api"]).list_watched()

        assert [(c.owner, c.name, c.commit_id) for c in candidates] == [
            ("octo", "app", "aaa111"),
            ("octo", "api", "bbb222"),
        ]
        assert candidates[0].publish_tag == "octo/app:aaa111"

    def test_asks_for_single_newest_commit(self):
        session = _Session({"/repos/octo/app/commits": _Resp(200, [{"sha": "a"}])})
        _source(session, ["octo/app"]).list_watched()
        url, headers, params = session.requests[0]
        assert url == "https://api.test/repos/octo/app/commits"
        assert params == {"per_page": 1}
        assert "Authorization" not in headers

    def test_token_sent_as_bearer(self):
        session = _Session({"/repos/octo/app/commits": _Resp(200, [{"sha": "a"}])})
        _source(session, ["octo/app"], token="t0k").list_watched()
        assert session.requests[0][1]["Authorization"] == "Bearer t0k"

    def test_missing_repository_skipped(self):
        session = _Session({"/repos/octo/app/commits": _Resp(200, [{"sha": "a"}])})
        candidates = _source(session, ["octo/gone", "octo/app"]).list_watched()
        assert [c.name for c in candidates] == ["app"]

    def test_empty_repository_skipped(self):
        session = _Session({"/repos/octo/new/commits": _Resp(409, {"message": "Git Repository is empty."})})
        assert _source(session, ["octo/new"]).list_watched() == []

    def test_rate_limit_raises(self):
        session = _Session({
            "/repos/octo/app/commits": _Resp(403, {}, headers={"X-RateLimit-Remaining": "0"}),
        })
        with pytest.raises(ChangeSourceError, match="rate limit"):
            _source(session, ["octo/app"]).list_watched()

    def test_server_error_raises(self):
        session = _Session({"/repos/octo/app/commits": _Resp(502, "bad gateway")})
        with pytest.raises(ChangeSourceError, match="502"):
            _source(session, ["octo/app"]).list_watched()

    def test_network_error_raises(self):
        session = _Session(exc=requests.ConnectionError("no route"))
        with pytest.raises(ChangeSourceError, match="no route"):
            _source(session, ["octo/app"]).list_watched()

    def test_malformed_body_raises(self):
        session = _Session({"/repos/octo/app/commits": _Resp(200, [{"no_sha": 1}])})
        with pytest.raises(ChangeSourceError, match="Unexpected"):
            _source(session, ["octo/app"]).list_watched()

    def test_protocol_compliance(self):
        assert isinstance(_source(_Session(), []), ChangeSource)


class TestEnsureConfig:
    def test_returns_remaining_budget(self):
        session = _Session({
            "/rate_limit": _Resp(200, {"resources": {"core": {"remaining": 42, "limit": 60}}}),
        })
        assert _source(session, ["octo/app"]).ensure_config() == 42

    def test_unreachable_api_raises(self):
        with pytest.raises(ChangeSourceError):
            _source(_Session(exc=requests.Timeout("slow")), []).ensure_config()
