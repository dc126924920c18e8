# scribe

A library for classifying, guarding and logging the tool calls that a coding
agent reports through its hook events.

## Modules

- `scribe.classify`: `classify_tool_call(tool_name, tool_input, cwd)` runs
  built-in heuristics and returns a `Classification` (tool name, matched
  pattern, `RiskLevel`, reason, heuristic name), or `None` when nothing
  matches. Dangerous heuristics are tried first, then risky, then safe; the
  first match wins. `RiskLevel` has the members `SAFE`, `RISKY` and
  `DANGEROUS`, whose `as_str()` gives `"safe"`, `"risky"` and `"dangerous"`.
- `scribe.guard`: `Rule` holds a tool-name regex, an optional tool-input
  regex, an `allow` or `deny` action, a reason, a priority and an enabled
  flag. `order_rules` keeps the enabled rules, highest priority first.
  `evaluate_rules` and `evaluate_payload` return a `GuardOutcome`; a rule
  with an invalid regex or an unknown action is skipped with a warning.
  `guard_exit_code(payload_text, rules)` returns `2` to deny and `0` to
  allow, allowing when no rule matches or when the payload cannot be read.
- `scribe.hooks`: `generate_hooks_config(with_guard)` builds the hooks
  settings for 21 events, each running `scribe log`; with the guard,
  `PreToolUse` runs `scribe guard` first. `merge_and_write(path, config)`
  merges them into a settings file, keeping other keys and other hooks and
  replacing an earlier `scribe log` entry in place, so a second run gives the
  same file. It raises `SettingsError` (and leaves the file alone) if the
  file is not a JSON object. `install_hooks(target, home, with_guard)` sends
  the configuration to an `OutputTarget`: `STDOUT`, `PROJECT`
  (`.claude/settings.json`) or `GLOBAL` (`~/.claude/settings.json`).
- `scribe.hooklog`: `parse_hook_payload(raw)` turns a raw hook payload into
  a `HookEvent`, storing `tool_input` and `tool_response` as compact JSON;
  it returns `None` for empty or malformed input. `retention_due` tells
  whether automatic retention should run, given the last check time and a
  check interval.
- `scribe.retain`: `prune_events(conn, retention, now)` deletes rows of an
  `events` table older than the retention duration and rows of a `sessions`
  table left without events, in one transaction, and returns a
  `RetentionResult` with the counts and `summary_lines()`.
- `scribe.policy`: `validate_rule`, `promote` (a classification turned into
  a `PolicyRule`; dangerous defaults to deny at priority 100, risky to deny
  at 50, safe to allow at 0), `export_rules` and `import_rules` for TOML
  policy files, and `enforcement_percentages`. Invalid input raises
  `PolicyError`.
- `scribe.report`: `ClassificationCount`, `summary_total`, `summary_json`,
  `summary_rows` and `truncate_detail` for classification summaries.
- `scribe.timespec`: `parse_duration` (`90d`, `1h 30m`, `1w`),
  `parse_time_spec` (a duration before now, an RFC 3339 timestamp or a
  `YYYY-MM-DD` date), `format_iso`, `format_timestamp`, `format_duration`
  and the truncation helpers `truncate_str`, `truncate_session_id`,
  `truncate_summary` and `truncate_cwd`.

## Examples

```python
from scribe.classify import RiskLevel, classify_tool_call

result = classify_tool_call("Bash", {"command": "rm -rf /tmp/build"}, None)
assert result.risk_level is RiskLevel.DANGEROUS
assert result.heuristic == "bash_destructive"
assert classify_tool_call("Read", None, None).risk_level.as_str() == "safe"
assert classify_tool_call("UnknownTool", None, None) is None
```

```python
from scribe.guard import Rule, guard_exit_code

rules = [Rule(id=1, tool_pattern="Bash", action="deny",
              reason="no forced deletion", input_pattern=r"rm\s+-rf")]
payload = '{"session_id": "s1", "tool_name": "Bash", "tool_input": {"command": "rm -rf /tmp"}}'
assert guard_exit_code(payload, rules) == 2
```

```python
from scribe.hooks import generate_hooks_config

config = generate_hooks_config(True)
commands = [hook["command"] for hook in config["hooks"]["PreToolUse"][0]["hooks"]]
assert commands == ["scribe guard", "scribe log"]
```

```python
from scribe.policy import export_rules, import_rules, promote

rule = promote("Bash", "rm -rf", "dangerous", "recursive force deletion")
assert (rule.action, rule.priority) == ("deny", 100)
assert import_rules(export_rules([rule]))[0].tool_pattern == "Bash"
```

```python
from scribe.timespec import format_duration, parse_time_spec

assert parse_time_spec("2025-06-01") == "2025-06-01T00:00:00.000Z"
assert format_duration("2025-01-01T10:00:00.000Z", "2025-01-01T12:14:00.000Z") == "2h 14m"
```

Timestamps are UTC in the form `YYYY-MM-DDTHH:MM:SS.mmmZ`, so they sort
correctly as plain strings.

## What it does not do

- There is no command-line program. The hooks configuration refers to the
  commands `scribe log` and `scribe guard`, but this package does not install
  them; `guard_exit_code` and `parse_hook_payload` take the payload text
  rather than reading stdin.
- There is no storage layer. The package does not create a database or its
  tables, and does not save events, classifications, rules or enforcement
  records; `prune_events` works on an open `sqlite3` connection whose
  `events` and `sessions` tables already exist.
- There is no query or listing output for events and sessions beyond the
  formatting helpers in `scribe.timespec` and `scribe.report`.