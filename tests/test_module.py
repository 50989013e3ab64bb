import pytest

from truerandom import debug
from truerandom.cache import MISSING_CREDENTIAL
from truerandom.dice import DiceConfig, roll
from truerandom.exceptions import SettingError, TrueRandomError
from truerandom.module import TrueRandomModule
from truerandom.settings import (APIKEY, DEBUG, ENABLED, MAXCACHEDNUMBERS, QUICKTOGGLE, SHOWSEEDS,
                                 UPDATEPOINT, Settings)
from truerandom.storage import API_KEY, LocalStorage
from truerandom.toggle import HIDDEN_CLASS, OFF, ON, VISIBLE_CLASS
from tests.fakes import FakeSource, Recorder


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture
def build(executor, storage):
    def _build(values=None, config=None, **kwargs):
        config = config or DiceConfig(random_uniform=lambda: 0.25)
        kwargs.setdefault("source_factory", lambda key: FakeSource(api_key=key))
        module = TrueRandomModule(config, settings=Settings(values=values), storage=storage,
                                  executor=executor, clock_ms=lambda: 0, **kwargs)
        return module.init()
    return _build


def test_init_replaces_host_uniform(build):
    module = build()
    assert module.dice_config.random_uniform == module.pipeline.draw
    assert module.cache.policy.capacity == 10
    assert module.cache.policy.refill_threshold == pytest.approx(0.5)


def test_missing_key_falls_back_and_alerts_once(build):
    alerts = Recorder()
    module = build(alert=alerts)
    assert module.dice_config.random_uniform() == 0.25
    assert module.dice_config.random_uniform() == 0.25
    assert alerts == [MISSING_CREDENTIAL]


def test_configured_key_is_mirrored_to_storage(build, storage, executor):
    module = build({APIKEY: "abc"})
    assert storage.get(API_KEY) == "abc"
    assert module.cache.source.api_key == "abc"
    assert executor.pending == 1


def test_stored_key_is_written_back(build, storage, executor):
    storage.set(API_KEY, "saved")
    module = build()
    assert module.settings.get(APIKEY) == "saved"
    assert module.cache.source.api_key == "saved"
    assert executor.pending == 1


def test_clearing_key_unbinds_and_forgets(build, storage):
    module = build({APIKEY: "abc"})
    module.settings.set(APIKEY, "")
    assert module.cache.source is None
    assert storage.get(API_KEY) is None


def test_rolls_use_true_random_values(build, executor):
    config = DiceConfig(random_uniform=lambda: 0.25)
    build({APIKEY: "abc"}, config=config)
    executor.run_all()
    r = roll("2d6", config)
    assert r.results == [1, 2]
    assert r.total == 3


def test_second_install_rejected(build):
    config = DiceConfig(random_uniform=lambda: 0.25)
    build(config=config)
    with pytest.raises(TrueRandomError):
        build(config=config)


def test_uninstall_restores_original(build):
    original = lambda: 0.125
    module = build(config=DiceConfig(random_uniform=original))
    module.uninstall()
    assert module.dice_config.random_uniform is original


def test_settings_drive_cache(build):
    module = build()
    module.settings.set(MAXCACHEDNUMBERS, 40)
    module.settings.set(UPDATEPOINT, 25)
    assert module.cache.policy.capacity == 40
    assert module.cache.policy.refill_threshold == pytest.approx(0.25)
    module.settings.set(ENABLED, False)
    assert module.cache.enabled is False
    with pytest.raises(SettingError):
        module.settings.set(MAXCACHEDNUMBERS, 500)
    assert module.cache.policy.capacity == 40


def test_toggle_click_flows_through_settings(build):
    module = build()
    toggle = module.render_toggle()
    assert toggle.label == ON
    assert toggle.click() == OFF
    assert module.settings.get(ENABLED) is False
    assert module.cache.enabled is False
    module.settings.set(ENABLED, True)
    assert toggle.label == ON
    assert module.cache.enabled is True


def test_toggle_visibility_and_gm_only(build):
    module = build({QUICKTOGGLE: False})
    assert module.render_toggle(is_gm=False) is None
    toggle = module.render_toggle()
    assert toggle.css_class == HIDDEN_CLASS
    module.settings.set(QUICKTOGGLE, True)
    assert toggle.css_class == VISIBLE_CLASS
    assert toggle.label == ON
    assert module.render_toggle() is toggle


def test_show_seeds_posts_to_chat(build, executor):
    chat = Recorder()
    build({APIKEY: "abc", SHOWSEEDS: True}, chat=chat, gm_ids=lambda: ["gm-1"])
    executor.run_all()
    assert len(chat) == 1
    assert chat[0].whisper == ["gm-1"]
    assert "Retrieved 10 true random seeds from fake" in chat[0].content


def test_seeds_hidden_by_default(build, executor):
    chat = Recorder()
    build({APIKEY: "abc"}, chat=chat)
    executor.run_all()
    assert chat == []


def test_debug_setting_switches_logging(build):
    module = build({DEBUG: False})
    assert not debug.is_enabled()
    module.settings.set(DEBUG, True)
    assert debug.is_enabled()
