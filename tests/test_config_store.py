import copy
import json

import pytest

from canvas.core.config_model import Configuration, FeatureSettings, NightShiftSettings
from canvas.core.config_store import ConfigStore
from canvas.core.errors import ConfigWriteError


def _write(store: ConfigStore, document) -> None:
    store.path.parent.mkdir(parents=True, exist_ok=True)
    store.path.write_text(json.dumps(document), encoding="utf-8")


def test_load_creates_defaults_and_layout(tmp_path):
    store = ConfigStore(tmp_path)
    store.ensure_layout()

    config = store.load()

    assert config == Configuration()
    assert store.path.exists()
    for name in ("modules", "flash", "config"):
        assert (tmp_path / name).is_dir()
    assert json.loads(store.path.read_text()) == Configuration().to_dict()


def test_saved_document_is_pretty_printed(tmp_path):
    store = ConfigStore(tmp_path)
    store.save(Configuration())

    text = store.path.read_text()
    assert text.startswith('{\n  "version"')


def test_partial_document_is_filled_recursively(tmp_path):
    store = ConfigStore(tmp_path)
    _write(
        store,
        {
            "display": {"dimAfter": 30, "nightShift": {"enabled": True, "warmth": 0.8}},
            "time": {"format": "24h"},
        },
    )

    config = store.load()

    assert config.display.dim_after == 30
    assert config.display.brightness == 100
    assert config.display.night_shift == NightShiftSettings(enabled=True, warmth=0.8)
    assert config.time.format == "24h"
    assert config.features == FeatureSettings()

    # The filled document was persisted, and a second load is identical.
    assert json.loads(store.path.read_text()) == config.to_dict()
    store.save(config)
    assert store.load() == config


def test_corrupt_document_falls_back_to_defaults(tmp_path):
    store = ConfigStore(tmp_path)
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{ not json", encoding="utf-8")

    config = store.load()

    assert config == Configuration()
    assert json.loads(store.path.read_text()) == Configuration().to_dict()


def test_non_object_document_falls_back_to_defaults(tmp_path):
    store = ConfigStore(tmp_path)
    _write(store, [1, 2, 3])

    assert store.load() == Configuration()


def test_invalid_values_are_replaced_or_clamped(tmp_path):
    store = ConfigStore(tmp_path)
    _write(
        store,
        {
            "display": {"brightness": 250, "dimAfter": "soon"},
            "animations": {"intensity": "extreme", "durationMultiplier": -1},
            "features": {"devTools": "yes"},
        },
    )

    config = store.load()

    assert config.display.brightness == 100
    assert config.display.dim_after == 120
    assert config.animations.intensity == "medium"
    assert config.animations.duration_multiplier == 1.0
    assert config.features.dev_tools is False


@pytest.mark.parametrize(
    "text",
    [
        '{"display": {"brightness": NaN}}',
        '{"display": {"dimAfter": Infinity}}',
        '{"display": {"dimAfter": 1e400}}',
        '{"display": {"nightShift": {"warmth": NaN}}}',
        '{"animations": {"durationMultiplier": Infinity}}',
        '{"animations": {"durationMultiplier": -Infinity}}',
    ],
)
def test_non_finite_numbers_fall_back_to_defaults(tmp_path, text):
    store = ConfigStore(tmp_path)
    store.path.parent.mkdir(parents=True)
    store.path.write_text(text, encoding="utf-8")

    config = store.load()

    assert config == Configuration()
    assert json.loads(store.path.read_text()) == Configuration().to_dict()


def test_save_failure_raises_write_error(tmp_path):
    (tmp_path / "config").write_text("not a directory")
    store = ConfigStore(tmp_path)

    with pytest.raises(ConfigWriteError):
        store.save(Configuration())


def test_load_never_raises_when_unwritable(tmp_path):
    (tmp_path / "config").write_text("not a directory")
    store = ConfigStore(tmp_path)

    assert store.load() == Configuration()


def test_save_leaves_no_temporary_files(tmp_path):
    store = ConfigStore(tmp_path)
    store.save(Configuration())
    store.save(Configuration())

    assert [p.name for p in store.path.parent.iterdir()] == ["settings.json"]


_FULL_DOCUMENT = {
    "version": "1.4.1",
    "display": {
        "brightness": 40,
        "dimAfter": 300,
        "nightShift": {
            "enabled": True,
            "startTime": "21:30",
            "endTime": "06:15",
            "warmth": 0.25,
        },
    },
    "time": {"format": "24h", "timezone": "Europe/Oslo"},
    "animations": {"intensity": "high", "springPhysics": False, "durationMultiplier": 1.5},
    "features": {"hapticFeedback": False, "devTools": True, "performanceMonitor": True},
}


def _key_paths(document, prefix=()):
    for key, value in document.items():
        yield prefix + (key,)
        if isinstance(value, dict):
            yield from _key_paths(value, prefix + (key,))


def _lookup(document, path):
    for key in path:
        document = document[key]
    return document


def test_round_trip_is_lossless():
    assert Configuration.from_dict(_FULL_DOCUMENT).to_dict() == _FULL_DOCUMENT


@pytest.mark.parametrize(
    "path", list(_key_paths(_FULL_DOCUMENT)), ids=lambda path: ".".join(path)
)
def test_missing_field_takes_default_and_survives_round_trip(tmp_path, path):
    document = copy.deepcopy(_FULL_DOCUMENT)
    del _lookup(document, path[:-1])[path[-1]]
    expected = copy.deepcopy(_FULL_DOCUMENT)
    _lookup(expected, path[:-1])[path[-1]] = _lookup(Configuration().to_dict(), path)
    store = ConfigStore(tmp_path)
    _write(store, document)

    config = store.load()

    assert config.to_dict() == expected
    store.save(config)
    assert store.load() == config


def test_load_raw_returns_none_when_absent(tmp_path):
    assert ConfigStore(tmp_path).load_raw() is None
