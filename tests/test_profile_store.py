import json

import pytest

from studio_nodes.state import clear_style_profile, get_style_profile, save_style_profile
from studio_shared.models import StyleProfile
from studio_shared.profile_store import (
    STYLE_PROFILE_KEY,
    LocalKeyValueStore,
    StyleProfileStore,
    default_store_path,
)


def test_missing_record_loads_default(profile_store):
    profile = profile_store.load()
    assert profile == StyleProfile()
    assert profile.is_empty


def test_save_then_load(profile_store, kv_store):
    profile = StyleProfile(
        voice_description="Ngắn gọn",
        target_audience="Sinh viên luật",
        custom_instructions="Không dùng từ lóng",
    )

    profile_store.save(profile)

    assert profile_store.load() == profile
    stored = json.loads(kv_store.get_item(STYLE_PROFILE_KEY))
    assert stored == {
        "brandVoice": "Ngắn gọn",
        "targetAudience": "Sinh viên luật",
        "customInstructions": "Không dùng từ lóng",
    }


@pytest.mark.parametrize("raw", [
    "{not json",
    "[1, 2, 3]",
    '{"brandVoice": 42}',
    '"just a string"',
])
def test_corrupt_record_loads_default(profile_store, kv_store, raw):
    kv_store.set_item(STYLE_PROFILE_KEY, raw)
    assert profile_store.load() == StyleProfile()


def test_corrupt_store_file_loads_default(tmp_path):
    path = tmp_path / "local_storage.json"
    path.write_text("\x00garbage", encoding="utf-8")

    store = StyleProfileStore(LocalKeyValueStore(path))

    assert store.load() == StyleProfile()


def test_partial_record_fills_missing_fields(profile_store, kv_store):
    kv_store.set_item(STYLE_PROFILE_KEY, '{"targetAudience": "Doanh nghiệp"}')

    profile = profile_store.load()

    assert profile.target_audience == "Doanh nghiệp"
    assert profile.voice_description == ""


def test_clear(profile_store):
    profile_store.save(StyleProfile(target_audience="x"))
    profile_store.clear()
    assert profile_store.load() == StyleProfile()


def test_kv_store_keeps_other_keys(kv_store):
    kv_store.set_item("other", "value")
    kv_store.set_item(STYLE_PROFILE_KEY, "{}")
    kv_store.remove_item(STYLE_PROFILE_KEY)

    assert kv_store.get_item("other") == "value"
    assert kv_store.get_item(STYLE_PROFILE_KEY) is None


def test_default_store_path_uses_data_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("STUDIO_DATA_DIR", str(tmp_path))
    assert default_store_path() == tmp_path / "local_storage.json"


def test_state_nodes_round_trip(ctx):
    save_style_profile(ctx, StyleProfile(voice_description="Hài hước"))

    assert get_style_profile(ctx).voice_description == "Hài hước"
    assert ctx.style_profile.voice_description == "Hài hước"

    clear_style_profile(ctx)
    assert get_style_profile(ctx).is_empty
