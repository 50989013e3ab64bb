"""Host-side pieces: dice engine, local storage, quick toggle, seed messages."""
import pytest

from truerandom.dice import DiceConfig, face_from_uniform, parse_formula, roll
from truerandom.seeds import SPEAKER, SeedAnnouncer, format_seeds
from truerandom.storage import LocalStorage
from truerandom.toggle import HIDDEN_CLASS, OFF, ON, VISIBLE_CLASS, ToggleController
from tests.fakes import Recorder


def test_parse_formula():
    assert parse_formula("3d6") == (3, 6)
    assert parse_formula("d20") == (1, 20)
    assert parse_formula(" 2 D 8 ") == (2, 8)
    for bad in ("", "3x6", "0d6", "2d0"):
        with pytest.raises(ValueError):
            parse_formula(bad)


def test_face_from_uniform_edges():
    assert face_from_uniform(2.2e-16, 6) == 1
    assert face_from_uniform(0.5, 6) == 3
    assert face_from_uniform(0.99999, 6) == 6
    assert face_from_uniform(1.0, 6) == 6


def test_roll_uses_config_hook():
    values = iter([0.1, 0.6, 0.95])
    r = roll("3d10", DiceConfig(random_uniform=lambda: next(values)))
    assert r.results == [1, 6, 10]
    assert r.uniforms == [0.1, 0.6, 0.95]
    assert r.total == 17


def test_local_storage_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.json"
    store = LocalStorage(path)
    assert store.get("k", "d") == "d"
    store.set("k", "v")
    assert LocalStorage(path).get("k") == "v"
    store.remove("k")
    assert LocalStorage(path).get("k") is None


def test_local_storage_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    assert LocalStorage(path).get("k") is None


def test_toggle_state_machine():
    state = {"enabled": False}
    toggle = ToggleController(lambda: state["enabled"], lambda v: state.update(enabled=v), visible=False)
    assert toggle.state == OFF
    assert toggle.css_class == HIDDEN_CLASS
    assert toggle.click() == ON
    assert state["enabled"] is True
    assert toggle.click() == OFF
    toggle.set_visible(True)
    assert toggle.css_class == VISIBLE_CLASS
    assert toggle.state == OFF


def test_seed_announcer_respects_switch():
    posted = Recorder()
    show = {"on": False}
    announce = SeedAnnouncer(posted, lambda: show["on"], lambda: ["gm"])
    announce([0.1, 0.2])
    assert posted == []
    show["on"] = True
    announce([0.1, 0.2])
    assert posted[0].speaker == SPEAKER
    assert posted[0].whisper == ["gm"]
    assert posted[0].content == format_seeds([0.1, 0.2])
    assert "0.1, 0.2" in posted[0].content
