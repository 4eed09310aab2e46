import pytest

from axsnap import observe
from axsnap.actions import ActionParams, SUPPORTED_ACTIONS, execute_action, is_domain_allowed, validate_key
from axsnap.actions.upload import validate_upload_paths
from axsnap.actions.wait import effective_wait_timeout
from axsnap.errors import (
    ActionError,
    DomainNotAllowedError,
    NavigationError,
    StaleRefError,
    TargetNotFoundError,
    ValidationError,
)

from fakes import FakeHandle, element, fast_settings, make_session


async def _observed_session(elements, **settings):
    session, page = make_session(elements, **settings)
    await observe(session)
    return session, page


@pytest.mark.asyncio
async def test_click_returns_fresh_snapshot_and_replaces_refs():
    session, page = await _observed_session([element("r1", "button", "Go"), element("r2", "link", "Home")])
    old_handle = session.refs["r1"]
    page.elements = [element("r1", "heading", "Done", tag="h1")]
    page.handles["r1"] = FakeHandle("h1")

    result = await execute_action(session, "click", {"ref": "r1"})

    assert result.success is True
    assert result.url == "https://example.com/"
    assert [(ref.ref, ref.role) for ref in result.snapshot.refs] == [("r1", "heading")]
    assert list(session.refs) == ["r1"]
    assert session.refs["r1"] is not old_handle
    assert ("click", {"timeout": 3000, "force": False, "click_count": 1}) in old_handle.calls
    assert ("wait_for_load_state", "domcontentloaded", 3000) in page.calls


@pytest.mark.asyncio
async def test_click_falls_back_to_forced_click():
    session, page = await _observed_session([element("r1", "button", "Go")])
    handle = page.handles["r1"]
    handle.click_errors = [RuntimeError("element is not visible")]

    await execute_action(session, "click", {"ref": "r1"})

    clicks = [call[1] for call in handle.calls if call[0] == "click"]
    assert [click["force"] for click in clicks] == [False, True]


@pytest.mark.asyncio
async def test_click_retries_transient_failures_then_wraps_the_message():
    session, page = await _observed_session([element("r1", "button", "Go")])
    handle = page.handles["r1"]
    handle.click_errors = [RuntimeError("Target closed")] * 4

    with pytest.raises(ActionError) as excinfo:
        await execute_action(session, "click", {"ref": "r1"})

    assert excinfo.value.action == "click"
    assert excinfo.value.reason == "Target closed"
    assert len([call for call in handle.calls if call[0] == "click"]) == 4


@pytest.mark.asyncio
async def test_stale_ref_surfaces_without_retry():
    session, page = await _observed_session([element("r1", "button", "Go")])
    page.handles["r1"].connected = False
    with pytest.raises(StaleRefError):
        await execute_action(session, "click", {"ref": "r1"})
    assert not [call for call in page.handles["r1"].calls if call[0] == "click"]


@pytest.mark.asyncio
async def test_type_fills_regular_fields():
    session, page = await _observed_session([element("r1", "textbox", "Username", tag="input", value="")])
    await execute_action(session, "type", {"ref": "r1", "value": "alice"})
    assert ("fill", "alice") in page.handles["r1"].calls
    assert page.keyboard.typed == []


@pytest.mark.asyncio
async def test_type_falls_back_to_keyboard_when_fill_fails():
    session, page = await _observed_session([element("r1", "textbox", "Search", tag="input", value="")])
    handle = page.handles["r1"]
    handle.fill_error = RuntimeError("Element is not an <input>")

    await execute_action(session, "type", {"ref": "r1", "value": "kittens"})

    assert ("click", {"timeout": 5000, "force": False, "click_count": 3}) in handle.calls
    assert page.keyboard.pressed == ["Delete"]
    assert page.keyboard.typed == ["kittens"]


@pytest.mark.asyncio
async def test_type_into_contenteditable_uses_keyboard():
    session, page = await _observed_session([element("r1", "textbox", "Notes", tag="div", value="old")])
    page.handles["r1"].editable = True

    await execute_action(session, "type", {"ref": "r1", "value": "new text"})

    assert not [call for call in page.handles["r1"].calls if call[0] == "fill"]
    assert page.keyboard.pressed == ["Delete"]
    assert page.keyboard.typed == ["new text"]


@pytest.mark.asyncio
async def test_type_allows_empty_value_but_requires_one():
    session, page = await _observed_session([element("r1", "textbox", "Name", tag="input", value="x")])
    await execute_action(session, "type", {"ref": "r1", "value": ""})
    assert ("fill", "") in page.handles["r1"].calls
    with pytest.raises(ValidationError, match="type requires value"):
        await execute_action(session, "type", {"ref": "r1"})


@pytest.mark.asyncio
async def test_select_native_option():
    session, page = await _observed_session([element("r1", "combobox", "Country", tag="select")])
    await execute_action(session, "select", {"ref": "r1", "value": "Spain"})
    assert ("select_option", "Spain") in page.handles["r1"].calls


@pytest.mark.asyncio
async def test_select_custom_dropdown_clicks_matching_option():
    session, page = await _observed_session([element("r1", "combobox", "Size", tag="div")])
    page.locator_hits.add('li:has-text("Large")')

    await execute_action(session, "select", {"ref": "r1", "value": "Large"})

    assert ("wait_for_timeout", 300) in page.calls
    assert ("locator_click", 'li:has-text("Large")') in page.calls


@pytest.mark.asyncio
async def test_select_custom_dropdown_without_match_fails():
    session, _ = await _observed_session([element("r1", "combobox", "Size", tag="div")])
    with pytest.raises(ActionError, match='Could not find option "Huge"'):
        await execute_action(session, "select", {"ref": "r1", "value": "Huge"})


@pytest.mark.asyncio
async def test_hover_waits_for_menus():
    session, page = await _observed_session([element("r1", "button", "Account")])
    await execute_action(session, "hover", {"ref": "r1"})
    assert ("hover", 3000) in page.handles["r1"].calls
    assert ("wait_for_timeout", 300) in page.calls


@pytest.mark.asyncio
async def test_scroll_page_by_direction():
    session, page = await _observed_session([])
    await execute_action(session, "scroll", {"direction": "up"})
    await execute_action(session, "scroll", {})
    assert ("evaluate", [0, -500]) in page.calls
    assert ("evaluate", [0, 500]) in page.calls
    assert ("wait_for_timeout", 400) in page.calls
    with pytest.raises(ValidationError, match="Invalid scroll direction"):
        await execute_action(session, "scroll", {"direction": "diagonal"})


@pytest.mark.asyncio
async def test_scroll_to_element():
    session, page = await _observed_session([element("r1", "button", "Footer link")])
    await execute_action(session, "scroll", {"ref": "r1"})
    assert page.handles["r1"].calls[0][0] == "scroll_into_view"


def test_validate_upload_paths(tmp_path):
    upload = tmp_path / "report.pdf"
    assert validate_upload_paths([str(upload)], ("/etc",)) == [str(upload.resolve())]
    with pytest.raises(ActionError, match="Path traversal"):
        validate_upload_paths(["../secret.txt"], ())
    with pytest.raises(ActionError, match="system path"):
        validate_upload_paths(["/etc/passwd"], ("/etc", "/proc"))
    with pytest.raises(ActionError, match="At least one"):
        validate_upload_paths([], ())


def test_validate_upload_paths_checks_literal_and_link_target(tmp_path):
    defaults = fast_settings().upload_blocked_prefixes
    with pytest.raises(ActionError, match="system path not allowed: /var/run/secrets/token"):
        validate_upload_paths(["/var/run/secrets/token"], defaults)

    blocked = tmp_path / "blocked"
    blocked.mkdir()
    link = tmp_path / "innocent"
    link.symlink_to(blocked)
    with pytest.raises(ActionError, match="system path"):
        validate_upload_paths([str(link / "key.pem")], (str(blocked.resolve()),))


@pytest.mark.asyncio
async def test_upload_sets_files(tmp_path):
    session, page = await _observed_session([element("r1", "button", "Attach", tag="input")])
    path = str((tmp_path / "a.txt").resolve())
    await execute_action(session, "upload", ActionParams(ref="r1", paths=[path]))
    assert ("set_input_files", [path]) in page.handles["r1"].calls


@pytest.mark.asyncio
async def test_upload_validation_runs_before_resolution():
    session, page = await _observed_session([])
    with pytest.raises(ActionError, match="system path"):
        await execute_action(session, "upload", {"ref": "r9", "paths": ["/proc/self/environ"]})


def test_effective_wait_timeout_is_capped():
    settings = fast_settings()
    assert effective_wait_timeout(None, settings) == 5000
    assert effective_wait_timeout(1000, settings) == 1000
    assert effective_wait_timeout(120000, settings) == 30000


@pytest.mark.asyncio
async def test_wait_for_selector_and_network_idle():
    session, page = await _observed_session([])
    await execute_action(session, "wait", {"selector": "#done", "state": "attached", "timeout_ms": 2000})
    await execute_action(session, "wait", {})
    assert ("wait_for_selector", "#done", "attached", 2000) in page.calls
    assert ("wait_for_load_state", "networkidle", 5000) in page.calls
    with pytest.raises(ValidationError, match="Invalid wait state"):
        await execute_action(session, "wait", {"selector": "#done", "state": "gone"})


@pytest.mark.asyncio
async def test_wait_timeout_is_not_retried():
    session, page = await _observed_session([])
    attempts = []

    async def slow_selector(selector, state=None, timeout=None):
        attempts.append(selector)
        raise TimeoutError("Timeout 5000ms exceeded.")

    page.wait_for_selector = slow_selector
    with pytest.raises(ActionError, match="Timeout 5000ms exceeded"):
        await execute_action(session, "wait", {"selector": "#never"})
    assert attempts == ["#never"]


@pytest.mark.parametrize("key", ["Enter", "F12", "Control+a", "Shift+Tab", "a", " ", "~"])
def test_validate_key_accepts(key):
    assert validate_key(key) == key


@pytest.mark.parametrize("key", ["", "Hyper+x", "Enter; rm -rf", "é", "ab"])
def test_validate_key_rejects(key):
    with pytest.raises(ActionError, match="Key not allowed"):
        validate_key(key)


@pytest.mark.asyncio
async def test_press_key():
    session, page = await _observed_session([])
    await execute_action(session, "press", {"key": "Enter"})
    assert page.keyboard.pressed == ["Enter"]
    assert ("wait_for_load_state", "domcontentloaded", 2000) in page.calls


class FakeDialog:
    type = "prompt"

    def __init__(self):
        self.answer = None

    async def accept(self, prompt_text=None):
        self.answer = ("accept", prompt_text)

    async def dismiss(self):
        self.answer = ("dismiss", None)


@pytest.mark.asyncio
async def test_dialog_handler_is_replaced_not_stacked():
    session, page = await _observed_session([])
    await execute_action(session, "dialog", {"dialog_action": "accept", "prompt_text": "hi"})
    await execute_action(session, "dialog", {"dialog_action": "dismiss"})

    handlers = page.listeners["dialog"]
    assert len(handlers) == 1
    dialog = FakeDialog()
    await handlers[0](dialog)
    assert dialog.answer == ("dismiss", None)
    assert session.dialog_config.action == "dismiss"


@pytest.mark.asyncio
async def test_dialog_accepts_with_prompt_text():
    session, page = await _observed_session([])
    await execute_action(session, "dialog", {"value": "accept", "prompt_text": "42"})
    dialog = FakeDialog()
    await page.listeners["dialog"][0](dialog)
    assert dialog.answer == ("accept", "42")
    with pytest.raises(ValidationError):
        await execute_action(session, "dialog", {"dialog_action": "ignore"})


def test_is_domain_allowed():
    assert is_domain_allowed("anything.org", ())
    assert is_domain_allowed("example.com", ("example.com",))
    assert is_domain_allowed("docs.example.com", ("example.com",))
    assert not is_domain_allowed("badexample.com", ("example.com",))
    assert not is_domain_allowed("example.com.evil.io", ("example.com",))


@pytest.mark.asyncio
async def test_navigate_goes_to_sanitized_url():
    session, page = await _observed_session([])
    result = await execute_action(session, "navigate", {"url": "HTTPS://Example.com"})
    assert ("goto", "https://example.com/", "domcontentloaded", 30000) in page.calls
    assert result.url == "https://example.com/"


@pytest.mark.asyncio
async def test_navigate_enforces_allowlist_and_protocols():
    session, page = await _observed_session([], allowed_domains=("example.com",))
    with pytest.raises(DomainNotAllowedError, match="evil.io"):
        await execute_action(session, "navigate", {"url": "https://evil.io/"})
    with pytest.raises(ValidationError, match="Blocked URL protocol"):
        await execute_action(session, "navigate", {"url": "javascript:alert(1)"})
    assert not [call for call in page.calls if call[0] == "goto"]


@pytest.mark.asyncio
async def test_navigate_failure_becomes_navigation_error():
    session, page = await _observed_session([])
    page.goto_errors = [RuntimeError("net::ERR_NAME_NOT_RESOLVED")]
    with pytest.raises(NavigationError, match="ERR_NAME_NOT_RESOLVED") as excinfo:
        await execute_action(session, "navigate", {"url": "https://nowhere.invalid/"})
    assert excinfo.value.code == "NAVIGATION_FAILED"


@pytest.mark.asyncio
async def test_navigate_retries_transient_timeouts():
    session, page = await _observed_session([])
    page.goto_errors = [RuntimeError("Timeout 30000ms exceeded.")]
    await execute_action(session, "navigate", {"url": "https://example.com/slow"})
    assert len([call for call in page.calls if call[0] == "goto"]) == 2


@pytest.mark.asyncio
async def test_dispatcher_rejects_unknown_action_and_missing_parameters():
    session, _ = await _observed_session([])
    with pytest.raises(ActionError, match="Unknown action"):
        await execute_action(session, "teleport", {})
    with pytest.raises(ValidationError, match="click requires ref or selector"):
        await execute_action(session, "click", {})
    with pytest.raises(ValidationError, match="select requires value"):
        await execute_action(session, "select", {"ref": "r1"})
    with pytest.raises(ValidationError, match="Invalid action parameters"):
        await execute_action(session, "wait", {"timeout_ms": "soon"})
    with pytest.raises(ValidationError, match="navigate requires url"):
        await execute_action(session, "navigate", {})


@pytest.mark.asyncio
async def test_selector_targets_work_without_a_snapshot():
    session, page = make_session()
    button = FakeHandle()
    page.selector_handles["#submit"] = button
    await execute_action(session, "click", {"selector": "#submit"})
    assert [call[0] for call in button.calls][:2] == ["scroll_into_view", "click"]


@pytest.mark.asyncio
async def test_missing_ref_is_target_not_found():
    session, _ = await _observed_session([element("r1")])
    with pytest.raises(TargetNotFoundError):
        await execute_action(session, "hover", {"ref": "r7"})


def test_supported_actions():
    assert set(SUPPORTED_ACTIONS) == {
        "click", "type", "select", "hover", "scroll", "upload", "wait", "press", "dialog", "navigate",
    }
