import json
import os

import pytest

from GestureTypes import GestureLabel
from helpers import (
    DEFAULT_CONFIG,
    ConfigWatcher,
    ConfigurationError,
    load_config,
    merge_config,
    section,
    validate_config,
    validate_word_table,
)


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "nope.json"))
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"stabilizer": {"hold_time": 1.0}}))
    cfg = load_config(str(path))
    assert cfg["stabilizer"]["hold_time"] == 1.0
    assert cfg["stabilizer"]["cooldown"] == DEFAULT_CONFIG["stabilizer"]["cooldown"]


def test_broken_json_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert load_config(str(path)) == DEFAULT_CONFIG


def test_word_table_is_replaced_not_merged():
    cfg = merge_config(DEFAULT_CONFIG, {"words": {"open_palm": "hi"}})
    assert cfg["words"] == {"open_palm": "hi"}
    assert section(cfg, "words") == {"open_palm": "hi"}


def test_section_fills_defaults():
    assert section({"idle": {}}, "idle")["idle_timeout"] == 3.0
    assert section(None, "assembler")["transcript_separator"] == ". "


def test_validate_word_table():
    table = validate_word_table(DEFAULT_CONFIG["words"], GestureLabel)
    assert table["open_palm"] == "hello"

    extra = dict(DEFAULT_CONFIG["words"], wave="goodbye")
    assert "wave" not in validate_word_table(extra, GestureLabel)

    blank = dict(DEFAULT_CONFIG["words"], victory="  ")
    with pytest.raises(ConfigurationError, match="victory"):
        validate_word_table(blank, GestureLabel)

    clash = dict(DEFAULT_CONFIG["words"], pointing_up="Hello")
    with pytest.raises(ConfigurationError):
        validate_word_table(clash, GestureLabel)


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


def test_watcher_reloads_on_change(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"idle": {"idle_timeout": 4.0}}))
    clock = FakeClock()
    watcher = ConfigWatcher(str(path), clock=clock)
    first = watcher.get_config()
    assert first["idle"]["idle_timeout"] == 4.0
    assert watcher.check_reload() is first

    path.write_text(json.dumps({"idle": {"idle_timeout": 6.0}}))
    mtime = os.path.getmtime(path) + 10
    os.utime(path, (mtime, mtime))

    # throttled until the check interval passes
    clock.t = 0.1
    assert watcher.check_reload() is first
    clock.t = 1.0
    reloaded = watcher.check_reload()
    assert reloaded is not first
    assert reloaded["idle"]["idle_timeout"] == 6.0


def test_watcher_keeps_config_when_file_disappears(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"idle": {"idle_timeout": 4.0}}))
    clock = FakeClock()
    watcher = ConfigWatcher(str(path), clock=clock)
    path.unlink()
    clock.t = 5.0
    assert watcher.check_reload()["idle"]["idle_timeout"] == 4.0


def test_defaults_pass_validation():
    validate_config(DEFAULT_CONFIG)
    validate_config(None)


@pytest.mark.parametrize(
    "override, key",
    [
        ({"classifier": {"confidence": 1.5}}, "classifier.confidence"),
        ({"classifier": {"confidence": 0}}, "classifier.confidence"),
        ({"classifier": {"extension_margin": -0.1}}, "classifier.extension_margin"),
        ({"stabilizer": {"stability_threshold": "x"}}, "stabilizer.stability_threshold"),
        ({"stabilizer": {"stability_threshold": 2.5}}, "stabilizer.stability_threshold"),
        ({"stabilizer": {"hold_time": True}}, "stabilizer.hold_time"),
        ({"stabilizer": {"min_confidence": float("nan")}}, "stabilizer.min_confidence"),
        ({"assembler": {"sentence_timeout": 0}}, "assembler.sentence_timeout"),
        ({"assembler": {"transcript_separator": 3}}, "assembler.transcript_separator"),
        ({"idle": {"idle_timeout": -1}}, "idle.idle_timeout"),
        ({"speech": {"volume": 2}}, "speech.volume"),
        ({"classifier": 5}, "classifier"),
    ],
)
def test_bad_tuning_values_are_rejected(override, key):
    with pytest.raises(ConfigurationError, match=key.replace(".", r"\.")):
        validate_config(merge_config(DEFAULT_CONFIG, override))
