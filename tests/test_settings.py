import pytest

from canvas.core.config_model import Configuration
from canvas.core.errors import InvalidSettingError
from canvas.core.settings import Setting


def test_resolve_by_path_alias_and_member():
    assert Setting.resolve("display.dimAfter") is Setting.DIM_AFTER
    assert Setting.resolve("display.nightShift.enabled") is Setting.NIGHT_SHIFT_ENABLED
    assert Setting.resolve("nightShift") is Setting.NIGHT_SHIFT_ENABLED
    assert Setting.resolve("timeFormat") is Setting.TIME_FORMAT
    assert Setting.resolve(Setting.BRIGHTNESS) is Setting.BRIGHTNESS


def test_resolve_unknown_setting():
    with pytest.raises(InvalidSettingError):
        Setting.resolve("display.contrast")


def test_apply_returns_new_configuration():
    config = Configuration()

    updated = Setting.DIM_AFTER.apply(config, 60)

    assert updated.display.dim_after == 60
    assert config.display.dim_after == 120
    assert updated.display.night_shift == config.display.night_shift


def test_apply_accepts_select_strings():
    updated = Setting.DIM_AFTER.apply(Configuration(), "300")
    assert updated.display.dim_after == 300


def test_apply_nested_night_shift_fields():
    config = Setting.NIGHT_SHIFT_START.apply(Configuration(), "9:05")
    config = Setting.NIGHT_SHIFT_WARMTH.apply(config, 0.75)

    assert config.display.night_shift.start_time == "09:05"
    assert config.display.night_shift.warmth == 0.75
    assert Setting.NIGHT_SHIFT_START.read(config) == "09:05"


@pytest.mark.parametrize(
    "setting, value",
    [
        (Setting.DIM_AFTER, 0),
        (Setting.DIM_AFTER, 1.5),
        (Setting.DIM_AFTER, "soon"),
        (Setting.BRIGHTNESS, 101),
        (Setting.NIGHT_SHIFT_ENABLED, "yes"),
        (Setting.NIGHT_SHIFT_END, "25:00"),
        (Setting.NIGHT_SHIFT_WARMTH, 1.5),
        (Setting.TIME_FORMAT, "military"),
        (Setting.ANIMATION_INTENSITY, "extreme"),
        (Setting.DURATION_MULTIPLIER, 0),
        (Setting.TIMEZONE, "Not/AZone"),
        (Setting.PERFORMANCE_MONITOR, 1),
        (Setting.DIM_AFTER, "inf"),
        (Setting.DIM_AFTER, "nan"),
        (Setting.DIM_AFTER, float("inf")),
        (Setting.BRIGHTNESS, float("nan")),
        (Setting.NIGHT_SHIFT_WARMTH, "nan"),
        (Setting.DURATION_MULTIPLIER, "inf"),
        (Setting.DURATION_MULTIPLIER, 10**400),
    ],
)
def test_invalid_values_are_rejected(setting, value):
    with pytest.raises(InvalidSettingError):
        setting.apply(Configuration(), value)


def test_invalid_setting_error_is_a_value_error():
    with pytest.raises(ValueError):
        Setting.BRIGHTNESS.validate(-1)
