"""
Tests for the browser hooks: cookies, response cache and history.

The transport is a scripted fake and files go to a temporary working
directory.
"""

import os

import pytest
from sqlalchemy import select

from http_browser.models.history import History
from http_browser.schemas.response import HTTPResponse
from http_browser.services.browser import USER_AGENTS, Browser, get_user_agent
from http_browser.services.cookie_store import SqlCookieStore


class ScriptedTransport:
    """Answers with scripted responses and records the headers of every hop."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def send(self, url, parsed_url, options, headers, post, timer):
        self.calls.append({"url": url, "headers": dict(headers)})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        result = response.model_copy(deep=True)
        result.request = f"{options.method} {parsed_url.request_target} HTTP/1.0\r\nHost: {parsed_url.host_header}\r\n\r\n"
        return result


def response(code=200, headers=None, body=b"", status_message="OK"):
    headers = headers or []
    folded = {}
    for name, value in headers:
        key = name.lower()
        if key in folded:
            previous = folded[key]
            folded[key] = (previous if isinstance(previous, list) else [previous]) + [value]
        else:
            folded[key] = value
    return HTTPResponse(
        protocol="HTTP/1.1",
        code=code,
        status_message=status_message,
        headers=folded,
        headers_raw=[f"{name}: {value}" for name, value in headers],
        body=body,
    )


@pytest.fixture
def browser_factory(tmp_path):
    def make(*responses, **kwargs):
        transport = ScriptedTransport(*responses)
        browser = Browser(cwd=str(tmp_path), transport=transport, **kwargs)
        return browser, transport

    return make


class TestCookies:
    """Cookie receive and send cycle."""

    def test_received_cookie_is_sent_back(self, browser_factory, tmp_path):
        browser, transport = browser_factory(
            response(headers=[("Set-Cookie", "sid=abc; Path=/")]),
            response(),
            options={"cookie_send": True, "cookie_receive": True},
        )

        browser.execute("http://example.com/login")
        browser.execute("http://example.com/account")

        assert "Cookie" not in transport.calls[0]["headers"]
        assert transport.calls[1]["headers"]["Cookie"] == "sid=abc"
        assert (tmp_path / "cookie.csv").exists()

    def test_cookie_set_during_redirect_reaches_next_hop(self, browser_factory):
        browser, transport = browser_factory(
            response(302, [("Location", "/home"), ("Set-Cookie", "sid=1"), ("Set-Cookie", "lang=en")]),
            response(body=b"home"),
            options={"cookie_send": True, "cookie_receive": True, "follow_location": True},
        )

        result = browser.execute("http://example.com/")

        assert result.body == b"home"
        assert transport.calls[1]["url"] == "http://example.com/home"
        assert transport.calls[1]["headers"]["Cookie"] == "sid=1; lang=en"

    def test_newer_cookie_replaces_older(self, browser_factory):
        browser, transport = browser_factory(
            response(headers=[("Set-Cookie", "sid=old")]),
            response(headers=[("Set-Cookie", "sid=new")]),
            response(),
            options={"cookie_send": True, "cookie_receive": True},
        )

        for _ in range(3):
            browser.execute("http://example.com/")

        assert transport.calls[2]["headers"]["Cookie"] == "sid=new"

    def test_cookies_stay_on_their_domain(self, browser_factory):
        browser, transport = browser_factory(
            response(headers=[("Set-Cookie", "sid=abc")]),
            response(),
            options={"cookie_send": True, "cookie_receive": True},
        )

        browser.execute("http://example.com/")
        browser.execute("http://other.test/")

        assert "Cookie" not in transport.calls[1]["headers"]

    def test_cookies_not_stored_when_receive_is_off(self, browser_factory, tmp_path):
        browser, _ = browser_factory(response(headers=[("Set-Cookie", "sid=abc")]))

        browser.execute("http://example.com/")

        assert not (tmp_path / "cookie.csv").exists()

    def test_sql_cookie_store(self, browser_factory, db_session):
        store = SqlCookieStore(db_session)
        browser, transport = browser_factory(
            response(headers=[("Set-Cookie", "sid=abc")]),
            response(),
            cookie_store=store,
            options={"cookie_send": True, "cookie_receive": True},
        )

        browser.execute("http://example.com/")
        browser.execute("http://example.com/")

        assert [cookie.name for cookie in store.load_all()] == ["sid"]
        assert transport.calls[1]["headers"]["Cookie"] == "sid=abc"

    def test_cookie_clear(self, browser_factory, tmp_path):
        browser, transport = browser_factory(
            response(headers=[("Set-Cookie", "sid=abc")]),
            response(),
            options={"cookie_send": True, "cookie_receive": True},
        )
        browser.execute("http://example.com/")

        moved = browser.cookie_clear()
        browser.execute("http://example.com/")

        assert moved == str(tmp_path / "cookie_0.csv")
        assert "Cookie" not in transport.calls[1]["headers"]


class TestCacheAndHistory:
    """Body cache files and the history log."""

    def test_each_body_gets_its_own_cache_file(self, browser_factory, tmp_path):
        browser, _ = browser_factory(
            response(body=b"first"),
            response(body=b"second"),
            options={"cache_save": True},
        )

        browser.execute("http://example.com/")
        first = browser.cache_filename
        browser.execute("http://example.com/")

        assert first == str(tmp_path / "cache.html")
        assert browser.cache_filename == str(tmp_path / "cache_0.html")
        assert (tmp_path / "cache.html").read_bytes() == b"first"
        assert (tmp_path / "cache_0.html").read_bytes() == b"second"

    def test_empty_body_is_not_cached(self, browser_factory, tmp_path):
        browser, _ = browser_factory(response(204), options={"cache_save": True})

        browser.execute("http://example.com/")

        assert browser.cache_filename is None
        assert not (tmp_path / "cache.html").exists()

    def test_history_log_has_one_entry_per_hop(self, browser_factory, tmp_path):
        browser, _ = browser_factory(
            response(302, [("Location", "/next")], status_message="Found"),
            response(body=b"done"),
            options={"history_save": True, "cache_save": True, "follow_location": True},
        )

        browser.execute("http://example.com/")

        log = (tmp_path / "history.log").read_text(encoding="utf-8")
        entries = [entry for entry in log.split("\n\n") if entry]
        assert len(entries) == 2
        assert "REQUEST:\tGET / HTTP/1.0" in entries[0]
        assert "RESPONSE:\tHTTP/1.1 302 Found\t\tLocation: /next" in entries[0]
        assert "CACHE:" not in entries[0]
        assert "REQUEST:\tGET /next HTTP/1.0" in entries[1]
        assert f"CACHE:\t\t{tmp_path / 'cache.html'}" in entries[1]

    def test_history_saved_to_database(self, browser_factory, db_session):
        browser, _ = browser_factory(
            response(body=b"hello", headers=[("Content-Type", "text/plain")]),
            db=db_session,
            options={"history_save": True},
        )

        browser.execute("http://example.com/page")

        records = db_session.scalars(select(History)).all()
        assert len(records) == 1
        record = records[0]
        assert record.url == "http://example.com/page"
        assert record.method == "GET"
        assert record.status_code == 200
        assert record.response_headers == ["Content-Type: text/plain"]
        assert record.response_size == 5

    def test_database_history_survives_log_failure(self, browser_factory, db_session, tmp_path):
        (tmp_path / "history.log").mkdir()
        browser, _ = browser_factory(
            response(body=b"hello"),
            db=db_session,
            options={"history_save": True},
        )

        result = browser.execute("http://example.com/page")

        assert result.code == 200
        assert "Failed to write content to" in browser.errors[-1]
        assert len(db_session.scalars(select(History)).all()) == 1

    def test_history_off_writes_nothing(self, browser_factory, tmp_path):
        browser, _ = browser_factory(response(body=b"x"))

        browser.execute("http://example.com/")

        assert not (tmp_path / "history.log").exists()


class TestWorkingDirectory:
    """set_cwd behaviour."""

    def test_missing_directory_is_rejected(self, tmp_path):
        browser = Browser(cwd=str(tmp_path))

        assert browser.set_cwd(str(tmp_path / "missing")) is False
        assert browser.get_cwd() == str(tmp_path)
        assert "directory not exists" in browser.errors[-1]

    def test_autocreate(self, tmp_path):
        browser = Browser(cwd=str(tmp_path))
        target = tmp_path / "data" / "run"

        assert browser.set_cwd(str(target), autocreate=True) is True
        assert browser.get_cwd() == str(target)
        assert os.path.isdir(target)

    def test_file_in_the_way(self, tmp_path):
        (tmp_path / "busy").write_text("x")
        browser = Browser(cwd=str(tmp_path))

        assert browser.set_cwd(str(tmp_path / "busy"), autocreate=True) is False
        assert "a file has same name" in browser.errors[-1]

    def test_files_follow_the_working_directory(self, tmp_path):
        browser = Browser(cwd=str(tmp_path))

        assert browser.path_of("history.log") == str(tmp_path / "history.log")
        assert browser.cookie_store.filename == str(tmp_path / "cookie.csv")


class TestProfile:
    """Preset browser profiles."""

    def test_profile_enables_cookies_and_redirects(self, tmp_path):
        browser = Browser.profile("mobile", cwd=str(tmp_path))

        assert browser.get_option("cookie_send") is True
        assert browser.get_option("cookie_receive") is True
        assert browser.get_option("follow_location") is True
        assert browser.get_option("user_agent") == USER_AGENTS["mobile"]

    def test_profile_user_agent_is_sent(self, tmp_path):
        transport = ScriptedTransport(response())
        browser = Browser.profile("desktop", cwd=str(tmp_path), transport=transport)

        browser.execute("http://example.com/")

        assert transport.calls[0]["headers"]["User-Agent"] == USER_AGENTS["desktop"]

    @pytest.mark.parametrize(
        "scenario, expected",
        [
            ("Mobile Browser", USER_AGENTS["mobile"]),
            ("mozilla firefox on windows 7", USER_AGENTS["mozilla firefox on windows 7"]),
            ("anything else", USER_AGENTS["desktop"]),
            ("", None),
            (None, None),
        ],
    )
    def test_get_user_agent(self, scenario, expected):
        assert get_user_agent(scenario) == expected

    def test_browser_options_defaults(self):
        options = Browser().get_options()

        assert options.cookie_send is False
        assert options.cookie_receive is False
        assert options.cache_save is False
        assert options.history_save is False
