from __future__ import annotations

import pytest

from vessel.exceptions import InvalidSettingsError
from vessel.upload import UploadSettings
from vessel.upload.settings import UploadSettingsSchema


def test_defaults_apply_for_missing_keys() -> None:
    assert UploadSettings.from_mapping({}) == UploadSettings(120.0, 10.0, 15.0)
    assert UploadSettings.from_mapping(None) == UploadSettings()


def test_camel_case_keys_are_loaded() -> None:
    settings = UploadSettings.from_mapping(
        {"tickMs": 50, "minSeconds": 1, "maxSeconds": 2, "extra": True}
    )
    assert settings == UploadSettings(tick_ms=50.0, min_seconds=1.0, max_seconds=2.0)


@pytest.mark.parametrize(
    "payload",
    [
        {"tickMs": 0},
        {"tickMs": -5},
        {"minSeconds": -1},
        {"minSeconds": 20, "maxSeconds": 5},
        {"tickMs": "fast"},
    ],
)
def test_invalid_settings_raise(payload) -> None:
    with pytest.raises(InvalidSettingsError) as excinfo:
        UploadSettings.from_mapping(payload)
    assert excinfo.value.errors


def test_min_equal_to_max_is_allowed() -> None:
    settings = UploadSettings.from_mapping({"minSeconds": 12, "maxSeconds": 12})
    assert settings.min_seconds == settings.max_seconds == 12


def test_dump_uses_camel_case() -> None:
    dumped = UploadSettingsSchema().dump(UploadSettings())
    assert dumped == {"tickMs": 120.0, "minSeconds": 10.0, "maxSeconds": 15.0}


def test_from_environment_reads_defaults() -> None:
    settings = UploadSettings.from_environment()
    assert settings.tick_ms > 0
    assert settings.min_seconds <= settings.max_seconds
