#!/usr/bin/env python3
"""Deezer authorization menu test runner.

Runs lightweight, local tests for:
- Menu wiring for the browser authorization flow (authorize URL -> redirect -> token)
- Failure paths leaving the session untouched
- Manual token entry and settings updates

This runner intentionally avoids network calls and never opens a browser.

Usage:
  cd deezer-auth
  python3 -m tests.run_auth_menu_tests

"""

from __future__ import annotations

import types
import unittest
import webbrowser
from dataclasses import dataclass
from typing import Any

# Ensure imports like `deezer_api.*` and `menus.*` work even when executed from repo root.
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from deezer_api.auth import AuthorizationStatus, Credentials, DeezerAuthSession
from deezer_api.errors import TransportError


# -------------------------
# Simple questionary mocks
# -------------------------

@dataclass
class _Askable:
    """Mimic questionary prompt objects that return a value from .ask()."""

    value: Any

    def ask(self):
        return self.value


class _QuestionaryMock:
    """A minimal questionary stub that returns queued answers and captures args."""

    def __init__(self):
        self._queue: list[Any] = []
        self.select_messages: list[str] = []
        self.last_select_choices = None
        self.last_text_message = None
        self.last_password_message = None
        self.last_confirm_message = None

    def queue(self, *answers: Any) -> None:
        self._queue.extend(list(answers))

    def _pop(self) -> Any:
        if not self._queue:
            raise AssertionError("QuestionaryMock queue exhausted")
        return self._queue.pop(0)

    def select(self, message: str, choices: list[Any]):
        self.select_messages.append(message)
        self.last_select_choices = choices
        return _Askable(self._pop())

    def text(self, message: str, default: str = ""):
        self.last_text_message = message
        return _Askable(self._pop())

    def password(self, message: str):
        self.last_password_message = message
        return _Askable(self._pop())

    def confirm(self, message: str, default: bool = True):
        self.last_confirm_message = message
        return _Askable(self._pop())


class _PatchModuleAttr:
    """Context manager to temporarily patch module attributes."""

    def __init__(self, module: types.ModuleType, attr: str, value: Any):
        self.module = module
        self.attr = attr
        self.value = value
        self._old = None

    def __enter__(self):
        self._old = getattr(self.module, self.attr)
        setattr(self.module, self.attr, self.value)

    def __exit__(self, exc_type, exc, tb):
        setattr(self.module, self.attr, self._old)


class _FakeTransport:
    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls = 0

    def send(self, url: str) -> str:
        self.calls += 1
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class _FakeBrowser:
    Error = webbrowser.Error

    def __init__(self):
        self.opened: list[str] = []

    def open(self, url: str) -> bool:
        self.opened.append(url)
        return True


# -------------------------
# Helpers
# -------------------------

CONFIG = {
    "deezer_app_id": "111",
    "deezer_app_secret": "secret",
    "deezer_redirect_uri": "http://127.0.0.1:8888/callback",
    "deezer_encode_redirect_uri": False,
    "deezer_request_timeout": 30,
    "open_browser": True,
}


def _session(*responses: Any) -> tuple[DeezerAuthSession, _FakeTransport]:
    transport = _FakeTransport(*responses)
    return DeezerAuthSession(Credentials("111", "secret"), transport=transport), transport


# -------------------------
# Tests
# -------------------------


class TestAuthMenuFlow(unittest.TestCase):
    def test_browser_flow_completes_session(self):
        import menus.auth_menu as am

        session, transport = _session("access_token=frTOKEN&expires=3600")
        q = _QuestionaryMock()
        q.queue(
            "Start authorization",
            "Paste redirect URL",
            "http://127.0.0.1:8888/callback?code=abc123",
            "Show status",
            "Exit",
        )
        browser = _FakeBrowser()

        with (
            _PatchModuleAttr(am, "questionary", q),
            _PatchModuleAttr(am, "webbrowser", browser),
        ):
            result = am.auth_menu(dict(CONFIG), session)

        self.assertIs(result, session)
        self.assertIs(session.status(), AuthorizationStatus.COMPLETED)
        self.assertEqual(session.token(), "frTOKEN")
        self.assertEqual(transport.calls, 1)
        self.assertEqual(
            browser.opened,
            [
                "https://connect.deezer.com/oauth/auth.php?app_id=111"
                "&redirect_uri=http://127.0.0.1:8888/callback&perms=basic_access"
            ],
        )
        self.assertIn("Exit", q.last_select_choices)
        self.assertIn("COMPLETED", q.select_messages[-1])

    def test_browser_disabled(self):
        import menus.auth_menu as am

        session, _ = _session()
        browser = _FakeBrowser()
        with _PatchModuleAttr(am, "webbrowser", browser):
            url = am.start_authorization({**CONFIG, "open_browser": False}, session)

        self.assertEqual(browser.opened, [])
        self.assertTrue(url.endswith("&perms=basic_access"))
        self.assertIs(session.status(), AuthorizationStatus.AWAITING_USER_AUTHORIZATION)

    def test_denied_redirect_keeps_session(self):
        import menus.auth_menu as am

        session, transport = _session()
        q = _QuestionaryMock()
        q.queue(
            "Paste redirect URL",
            "http://127.0.0.1:8888/callback?error_reason=user_denied",
            "Exit",
        )

        with _PatchModuleAttr(am, "questionary", q):
            am.auth_menu(dict(CONFIG), session)

        self.assertIs(session.status(), AuthorizationStatus.NOT_STARTED)
        self.assertEqual(session.token(), "")
        self.assertEqual(transport.calls, 0)

    def test_transport_failure_reports_false(self):
        import menus.auth_menu as am

        session, _ = _session(TransportError("Deezer request failed (HTTP 500)"))
        ok = am.complete_authorization(session, "http://127.0.0.1:8888/callback?code=abc")

        self.assertFalse(ok)
        self.assertIs(session.status(), AuthorizationStatus.CODE_RECEIVED)
        self.assertEqual(session.token(), "")

    def test_paste_token(self):
        import menus.auth_menu as am

        session, _ = _session()
        q = _QuestionaryMock()
        q.queue("Paste access token", "", "Paste access token", "pasted", None)

        with _PatchModuleAttr(am, "questionary", q):
            am.auth_menu(dict(CONFIG), session)

        self.assertEqual(session.token(), "pasted")
        self.assertIs(session.status(), AuthorizationStatus.TOKEN_ACQUIRED)
        self.assertEqual(q.last_password_message, "Access token:")

    def test_paste_token_after_completion_is_refused(self):
        import menus.auth_menu as am

        session, _ = _session("access_token=frTOKEN&expires=3600")
        self.assertTrue(am.complete_authorization(session, "http://127.0.0.1:8888/callback?code=abc"))

        q = _QuestionaryMock()
        q.queue("Paste access token", "pasted", "Exit")
        with _PatchModuleAttr(am, "questionary", q):
            am.auth_menu(dict(CONFIG), session)

        self.assertEqual(session.token(), "frTOKEN")
        self.assertEqual(session.expiry(), "3600")
        self.assertIs(session.status(), AuthorizationStatus.COMPLETED)


class TestAuthMenuSettings(unittest.TestCase):
    def test_check_configuration(self):
        import menus.auth_menu as am

        self.assertTrue(am.check_configuration(dict(CONFIG)))
        self.assertFalse(am.check_configuration({**CONFIG, "deezer_app_secret": ""}))

    def test_update_setting_uses_validated_update(self):
        import menus.auth_menu as am

        q = _QuestionaryMock()
        q.queue("deezer_encode_redirect_uri", True)
        calls = []

        def fake_update_config(key, value):
            calls.append((key, value))
            return True, f"Updated '{key}' to '{value}'"

        with (
            _PatchModuleAttr(am, "questionary", q),
            _PatchModuleAttr(am, "update_config", fake_update_config),
        ):
            config = am.update_setting_menu(dict(CONFIG))

        self.assertEqual(calls, [("deezer_encode_redirect_uri", True)])
        self.assertTrue(config["deezer_encode_redirect_uri"])
        self.assertEqual(q.last_confirm_message, "Enable deezer_encode_redirect_uri?")

    def test_update_secret_prompts_password(self):
        import menus.auth_menu as am

        q = _QuestionaryMock()
        q.queue("deezer_app_secret", "new-secret")

        with (
            _PatchModuleAttr(am, "questionary", q),
            _PatchModuleAttr(am, "update_config", lambda key, value: (False, "Validation failed")),
        ):
            config = am.update_setting_menu(dict(CONFIG))

        self.assertEqual(q.last_password_message, "Enter new value for deezer_app_secret:")
        self.assertEqual(config["deezer_app_secret"], "secret")

    def test_invalid_timeout_is_rejected(self):
        import menus.auth_menu as am

        q = _QuestionaryMock()
        q.queue("deezer_request_timeout", "soon")

        with _PatchModuleAttr(am, "questionary", q):
            config = am.update_setting_menu(dict(CONFIG))

        self.assertEqual(config["deezer_request_timeout"], 30)


class TestMainEntryPoint(unittest.TestCase):
    def _run_main(self, config: dict) -> tuple[int, list]:
        import main as entry

        menu_calls = []

        def fake_menu(cfg, session):
            menu_calls.append(session)
            return session

        with (
            _PatchModuleAttr(entry, "setup_logging", lambda: None),
            _PatchModuleAttr(entry, "load_config", lambda: dict(config)),
            _PatchModuleAttr(entry, "auth_menu", fake_menu),
        ):
            code = entry.main()
        return code, menu_calls

    def test_non_numeric_timeout_exits_with_error(self):
        code, menu_calls = self._run_main({**CONFIG, "deezer_request_timeout": "soon"})

        self.assertEqual(code, 1)
        self.assertEqual(menu_calls, [])

    def test_valid_config_opens_menu(self):
        code, menu_calls = self._run_main(dict(CONFIG))

        self.assertEqual(code, 0)
        self.assertEqual(len(menu_calls), 1)
        self.assertEqual(menu_calls[0].transport.timeout, 30.0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
