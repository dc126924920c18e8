import json

import pytest

from scribe.hooks import (
    OutputTarget,
    SettingsError,
    generate_hooks_config,
    install_hooks,
    is_scribe_entry,
    merge_and_write,
)

ALL_EVENTS = [
    "PreToolUse",
    "PostToolUse",
    "PostToolUseFailure",
    "UserPromptSubmit",
    "PermissionRequest",
    "SessionStart",
    "SessionEnd",
    "SubagentStart",
    "SubagentStop",
    "Stop",
    "StopFailure",
    "Notification",
    "PreCompact",
    "PostCompact",
    "InstructionsLoaded",
    "ConfigChange",
    "WorktreeRemove",
    "Elicitation",
    "ElicitationResult",
    "TeammateIdle",
    "TaskCompleted",
]

WITH_MATCHER = [
    "PreToolUse",
    "PostToolUse",
    "PostToolUseFailure",
    "PermissionRequest",
    "SessionStart",
    "SessionEnd",
    "SubagentStart",
    "SubagentStop",
    "StopFailure",
    "Notification",
    "PreCompact",
    "PostCompact",
    "InstructionsLoaded",
    "ConfigChange",
    "Elicitation",
    "ElicitationResult",
]

WITHOUT_MATCHER = [
    "UserPromptSubmit",
    "Stop",
    "WorktreeRemove",
    "TeammateIdle",
    "TaskCompleted",
]


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_generates_valid_json():
    config = generate_hooks_config(False)
    assert json.loads(json.dumps(config, indent=2)) == config


def test_all_21_events_present():
    assert len(generate_hooks_config(False)["hooks"]) == 21


def test_no_worktree_create():
    assert "WorktreeCreate" not in generate_hooks_config(False)["hooks"]


@pytest.mark.parametrize("event", WITH_MATCHER)
def test_matcher_events_have_matcher(event):
    entries = generate_hooks_config(False)["hooks"][event]
    assert len(entries) == 1
    assert entries[0]["matcher"] == "*"


@pytest.mark.parametrize("event", WITHOUT_MATCHER)
def test_non_matcher_events_omit_matcher(event):
    entry = generate_hooks_config(False)["hooks"][event][0]
    assert "matcher" not in entry


@pytest.mark.parametrize("event", ALL_EVENTS)
def test_hook_command_and_timeout(event):
    hook = generate_hooks_config(False)["hooks"][event][0]["hooks"][0]
    assert hook["type"] == "command"
    assert hook["command"] == "scribe log"
    assert hook["timeout"] == 10


def test_canonical_event_order():
    assert list(generate_hooks_config(False)["hooks"]) == ALL_EVENTS


def test_new_file_created(tmp_path):
    path = tmp_path / "sub" / "settings.json"
    merge_and_write(path, generate_hooks_config(False))
    assert path.exists()
    assert len(read_json(path)["hooks"]) == 21


def test_file_ends_with_newline(tmp_path):
    path = tmp_path / "settings.json"
    merge_and_write(path, generate_hooks_config(False))
    assert path.read_text(encoding="utf-8").endswith("}\n")


def test_merge_preserves_non_hooks_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text('{"permissions":{"allow":["Bash"]},"hooks":{}}', encoding="utf-8")
    merge_and_write(path, generate_hooks_config(False))
    content = read_json(path)
    assert content["permissions"]["allow"] == ["Bash"]
    assert len(content["hooks"]) == 21


def test_merge_preserves_non_scribe_event_hooks(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        '{"hooks":{"WorktreeCreate":[{"hooks":[{"type":"command","command":"my-worktree-handler"}]}]}}',
        encoding="utf-8",
    )
    merge_and_write(path, generate_hooks_config(False))
    hooks = read_json(path)["hooks"]
    assert "WorktreeCreate" in hooks
    assert "PreToolUse" in hooks
    assert len(hooks) == 22


def test_merge_preserves_non_scribe_hooks_on_same_event(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        '{"hooks":{"PreToolUse":[{"matcher":"Bash","hooks":[{"type":"command","command":"my-linter"}]},'
        '{"matcher":"*","hooks":[{"type":"command","command":"scribe log","timeout":10}]}]}}',
        encoding="utf-8",
    )
    merge_and_write(path, generate_hooks_config(False))
    pre = read_json(path)["hooks"]["PreToolUse"]
    assert len(pre) == 2
    assert pre[0]["hooks"][0]["command"] == "my-linter"
    assert pre[1]["hooks"][0]["command"] == "scribe log"


def test_merge_appends_when_no_scribe_entry(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        '{"hooks":{"PreToolUse":[{"matcher":"Bash","hooks":[{"type":"command","command":"my-linter"}]}]}}',
        encoding="utf-8",
    )
    merge_and_write(path, generate_hooks_config(False))
    pre = read_json(path)["hooks"]["PreToolUse"]
    assert len(pre) == 2
    assert pre[0]["hooks"][0]["command"] == "my-linter"
    assert pre[1]["hooks"][0]["command"] == "scribe log"


def test_merge_is_idempotent(tmp_path):
    path = tmp_path / "settings.json"
    config = generate_hooks_config(False)
    merge_and_write(path, config)
    first = path.read_text(encoding="utf-8")
    merge_and_write(path, config)
    assert path.read_text(encoding="utf-8") == first


def test_merge_replaces_with_guard_entry(tmp_path):
    path = tmp_path / "settings.json"
    merge_and_write(path, generate_hooks_config(False))
    merge_and_write(path, generate_hooks_config(True))
    pre = read_json(path)["hooks"]["PreToolUse"]
    assert len(pre) == 1
    assert [h["command"] for h in pre[0]["hooks"]] == ["scribe guard", "scribe log"]


def test_invalid_json_returns_error(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("not json {{{", encoding="utf-8")
    with pytest.raises(SettingsError, match="invalid JSON"):
        merge_and_write(path, generate_hooks_config(False))
    assert path.read_text(encoding="utf-8") == "not json {{{"


def test_non_object_settings_rejected(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SettingsError, match="not a JSON object"):
        merge_and_write(path, generate_hooks_config(False))


def test_non_object_hooks_rejected(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text('{"hooks": []}', encoding="utf-8")
    with pytest.raises(SettingsError, match="'hooks'"):
        merge_and_write(path, generate_hooks_config(False))


def test_run_global_with_home_override(tmp_path):
    written = install_hooks(OutputTarget.GLOBAL, tmp_path, False)
    path = tmp_path / ".claude" / "settings.json"
    assert written == path
    assert len(read_json(path)["hooks"]) == 21


def test_run_project_writes_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    written = install_hooks(OutputTarget.PROJECT, None, True)
    expected = (tmp_path / ".claude" / "settings.json").resolve()
    assert written is not None
    assert written.resolve() == expected
    content = read_json(expected)
    assert content["hooks"]["PreToolUse"][0]["hooks"][0]["command"] == "scribe guard"


def test_run_stdout_prints_config(capsys):
    assert install_hooks(OutputTarget.STDOUT, None, False) is None
    printed = json.loads(capsys.readouterr().out)
    assert printed == generate_hooks_config(False)


def test_with_guard_adds_guard_to_pretooluse():
    hooks = generate_hooks_config(True)["hooks"]["PreToolUse"][0]["hooks"]
    assert len(hooks) == 2
    assert hooks[0]["command"] == "scribe guard"
    assert hooks[1]["command"] == "scribe log"


def test_with_guard_only_on_pretooluse():
    config = generate_hooks_config(True)
    post = config["hooks"]["PostToolUse"][0]["hooks"]
    assert [h["command"] for h in post] == ["scribe log"]
    session = config["hooks"]["SessionStart"][0]["hooks"]
    assert [h["command"] for h in session] == ["scribe log"]


def test_without_guard_unchanged():
    hooks = generate_hooks_config(False)["hooks"]["PreToolUse"][0]["hooks"]
    assert [h["command"] for h in hooks] == ["scribe log"]


def test_guard_has_correct_timeout():
    guard = generate_hooks_config(True)["hooks"]["PreToolUse"][0]["hooks"][0]
    assert guard["timeout"] == 10


@pytest.mark.parametrize(
    ("entry", "expected"),
    [
        ({"hooks": [{"command": "scribe log"}]}, True),
        ({"hooks": [{"command": "scribe guard"}, {"command": "scribe log --x"}]}, True),
        ({"hooks": [{"command": "my-linter"}]}, False),
        ({"hooks": "scribe log"}, False),
        ("scribe log", False),
        ({}, False),
    ],
)
def test_is_scribe_entry(entry, expected):
    assert is_scribe_entry(entry) is expected