import copy
import json
import logging
import math
import os
import time

log = logging.getLogger(__name__)


# ---------- defaults ----------
DEFAULT_CONFIG = {
    "classifier": {
        "extension_margin": 0.02,
        "thumb_margin": 0.03,
        "thumb_down_margin": 0.05,
        "confidence": 0.9,
    },
    "stabilizer": {
        "stability_threshold": 2,
        "hold_time": 0.8,
        "cooldown": 0.5,
        "min_confidence": 0.3,
    },
    "assembler": {
        "sentence_timeout": 1.5,
        "transcript_separator": ". ",
    },
    "idle": {
        "idle_timeout": 3.0,
    },
    "words": {
        "thumbs_up": "yes",
        "thumbs_down": "no",
        "victory": "peace",
        "pointing_up": "up",
        "open_palm": "hello",
        "closed_fist": "stop",
    },
    "speech": {
        "lang": "en-US",
        "rate": 1.0,
        "pitch": 1.0,
        "volume": 1.0,
    },
    "tracker": {
        "max_num_hands": 1,
        "model_complexity": 1,
        "min_detection_confidence": 0.3,
        "min_tracking_confidence": 0.3,
    },
    "camera": {"index": 0},
    "debug": {"show_window": True, "draw_landmarks": True},
    "network": {"transport": "tcp", "host": "127.0.0.1", "port": 5555},
}


class ConfigurationError(ValueError):
    """Raised when the configuration cannot drive a session (e.g. word table gaps)."""


# Sections taken as a whole from the override; a partial word table must stay partial.
REPLACED_SECTIONS = ("words",)


def merge_config(base, override, replace=REPLACED_SECTIONS):
    """Deep-merge `override` into a copy of `base` and return the copy."""
    merged = copy.deepcopy(base) if base else {}
    if not override:
        return merged
    for k, v in override.items():
        if k not in replace and isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = merge_config(merged[k], v, replace=())
        else:
            merged[k] = copy.deepcopy(v)
    return merged


def section(cfg, name):
    """Return config section `name` merged over its defaults."""
    override = (cfg or {}).get(name)
    if name in REPLACED_SECTIONS and override is not None:
        return dict(override)
    return merge_config(DEFAULT_CONFIG.get(name, {}), override or {}, replace=())


def validate_word_table(words, labels):
    """
    Check that every label maps to a non-empty word and that no two labels
    share a word. Returns a plain {label_value: word} dict.
    """
    words = words or {}
    table = {}
    missing = []
    for label in labels:
        key = getattr(label, "value", label)
        word = words.get(key)
        if not isinstance(word, str) or not word.strip():
            missing.append(key)
            continue
        table[key] = word.strip()
    if missing:
        raise ConfigurationError(
            "word table has no entry for gesture(s): " + ", ".join(sorted(missing))
        )

    seen = {}
    for key, word in table.items():
        other = seen.get(word.lower())
        if other is not None:
            raise ConfigurationError(
                f"gestures '{other}' and '{key}' both map to the word '{word}'"
            )
        seen[word.lower()] = key
    return table


# (section, key) -> (kind, low, high, low_inclusive); None bounds are open.
TUNING_RULES = {
    ("classifier", "extension_margin"): ("number", 0.0, None, True),
    ("classifier", "thumb_margin"): ("number", 0.0, None, True),
    ("classifier", "thumb_down_margin"): ("number", 0.0, None, True),
    ("classifier", "confidence"): ("number", 0.0, 1.0, False),
    ("stabilizer", "stability_threshold"): ("int", 1, None, True),
    ("stabilizer", "hold_time"): ("number", 0.0, None, True),
    ("stabilizer", "cooldown"): ("number", 0.0, None, True),
    ("stabilizer", "min_confidence"): ("number", 0.0, 1.0, True),
    ("assembler", "sentence_timeout"): ("number", 0.0, None, False),
    ("assembler", "transcript_separator"): ("str", None, None, True),
    ("idle", "idle_timeout"): ("number", 0.0, None, False),
    ("speech", "lang"): ("str", None, None, True),
    ("speech", "rate"): ("number", 0.0, None, False),
    ("speech", "pitch"): ("number", 0.0, None, True),
    ("speech", "volume"): ("number", 0.0, 1.0, True),
}


def _check_value(name, value, kind, low, high, low_inclusive):
    if kind == "str":
        if not isinstance(value, str):
            raise ConfigurationError(f"{name} must be a string, got {value!r}")
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if kind == "int" and not float(value).is_integer():
        raise ConfigurationError(f"{name} must be a whole number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    if low is not None and (value < low or (value == low and not low_inclusive)):
        bound = ">=" if low_inclusive else ">"
        raise ConfigurationError(f"{name} must be {bound} {low}, got {value!r}")
    if high is not None and value > high:
        raise ConfigurationError(f"{name} must be <= {high}, got {value!r}")


def validate_config(cfg):
    """
    Check every tuning value's type and range in one pass. Raises
    ConfigurationError naming the first bad `section.key`; changes nothing.
    """
    for name in DEFAULT_CONFIG:
        value = (cfg or {}).get(name)
        if value is not None and not isinstance(value, dict):
            raise ConfigurationError(f"config section '{name}' must be an object")
    for (name, key), rule in TUNING_RULES.items():
        _check_value(f"{name}.{key}", section(cfg, name)[key], *rule)


def load_config(path="config.json"):
    if not os.path.exists(path):
        log.warning("config '%s' not found, using defaults.", path)
        return merge_config(DEFAULT_CONFIG, {})
    try:
        with open(path, "r", encoding="utf-8") as f:
            return merge_config(DEFAULT_CONFIG, json.load(f))
    except (OSError, ValueError) as e:
        log.error("Failed to load config %s: %s", path, e)
        return merge_config(DEFAULT_CONFIG, {})


def setup_logging(level="INFO"):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="[%(name)s] %(message)s",
    )


class ConfigWatcher:
    """
    Watches a JSON config file and reloads it when the file changes.
    Usage:
        watcher = ConfigWatcher("config.json")
        cfg = watcher.get_config()        # initial load
        # later:
        cfg = watcher.check_reload()      # returns new cfg or same dict
    """

    def __init__(self, path="config.json", min_check_interval=0.5, clock=time.monotonic):
        self.path = path
        self._clock = clock
        self._cfg = merge_config(DEFAULT_CONFIG, {})
        self._mtime = 0.0
        self._last_checked = None
        self._min_check_interval = min_check_interval  # seconds between checks
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            self._mtime = 0.0
            return
        try:
            m = os.path.getmtime(self.path)
            with open(self.path, "r", encoding="utf-8") as f:
                self._cfg = merge_config(DEFAULT_CONFIG, json.load(f))
            self._mtime = m
        except (OSError, ValueError) as e:
            log.error("failed to load config: %s", e)

    def get_config(self):
        return self._cfg

    def check_reload(self):
        """
        Call frequently (cheap). Will only stat the file every _min_check_interval seconds.
        Returns current config (reloaded if changed).
        """
        now = self._clock()
        if (
            self._last_checked is not None
            and now - self._last_checked < self._min_check_interval
        ):
            return self._cfg
        self._last_checked = now

        try:
            if not os.path.exists(self.path):
                # file missing -> keep existing config
                return self._cfg
            m = os.path.getmtime(self.path)
        except OSError as e:
            log.error("check_reload error: %s", e)
            return self._cfg

        if m != self._mtime:
            log.info("Detected %s change, reloading...", self.path)
            self._load()
        return self._cfg
