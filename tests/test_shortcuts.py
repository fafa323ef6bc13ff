"""Tests for the shortcut registry."""

import json

import pytest

from image_tagger.core.errors import DuplicateKey, InvalidAction
from image_tagger.core.shortcuts import Action, Shortcut, ShortcutRegistry
from image_tagger.utils.config import Config


def test_add_normalizes_key(registry):
    """Test that keys are stored lowercase and folder verbatim."""
    shortcut = registry.add("D", "Dogs/Good Boys", "move")

    assert shortcut == Shortcut(key="d", folder="Dogs/Good Boys", action=Action.MOVE)
    assert registry.get("d") == shortcut
    assert registry.get("D") == shortcut


def test_add_persists(config, registry):
    """Test that adding a shortcut writes the settings file."""
    registry.add("x", "keep", "copy")

    with open(config.config_file, "r", encoding="utf-8") as f:
        stored = json.load(f)
    assert stored["shortcuts"] == [{"key": "x", "folder": "keep", "action": "copy"}]

    reloaded = ShortcutRegistry(Config(config.config_file))
    assert reloaded.get("x") == Shortcut("x", "keep", Action.COPY)


def test_duplicate_key_leaves_registry_unchanged(registry):
    """Test that registering a bound key fails and changes nothing."""
    registry.add("d", "dogs", "move")

    with pytest.raises(DuplicateKey):
        registry.add("D", "other", "copy")

    assert len(registry) == 1
    assert registry.get("d").folder == "dogs"


def test_invalid_action(registry):
    with pytest.raises(InvalidAction):
        registry.add("z", "trash", "shred")
    assert len(registry) == 0


@pytest.mark.parametrize("key", ["", "ab", " ", "\t"])
def test_invalid_key(registry, key):
    with pytest.raises(ValueError):
        registry.add(key, "folder")


def test_empty_folder_rejected(registry):
    with pytest.raises(ValueError):
        registry.add("a", "")


def test_remove(config, registry):
    """Test removing a key, and that removing an unbound key is a no-op."""
    registry.add("a", "cats")
    registry.add("b", "birds", "copy")

    assert registry.remove("A") is True
    assert registry.remove("q") is False
    assert registry.keys() == ["b"]
    assert Config(config.config_file).get_shortcut_records() == [
        {"key": "b", "folder": "birds", "action": "copy"}
    ]


def test_order_is_kept(registry):
    for key in "cab":
        registry.add(key, f"folder-{key}")

    assert [s.key for s in registry] == ["c", "a", "b"]


def test_reload_skips_duplicates_in_file(config):
    """Test that a hand-edited settings file with repeated keys keeps the first."""
    config.set_shortcut_records(
        [
            {"key": "a", "folder": "first", "action": "move"},
            {"key": "A", "folder": "second", "action": "copy"},
        ]
    )

    registry = ShortcutRegistry(config)

    assert len(registry) == 1
    assert registry.get("a").folder == "first"


def test_action_parse():
    assert Action.parse("copy") is Action.COPY
    with pytest.raises(InvalidAction):
        Action.parse("rename")


def test_action_parse_is_exact():
    """Test that actions must be spelled exactly as stored."""
    with pytest.raises(InvalidAction):
        Action.parse("MOVE")


@pytest.mark.parametrize(
    "record",
    [
        {"key": "b", "folder": "birds", "action": "rename"},
        {"key": "b", "action": "move"},
        {"key": "b", "folder": "", "action": "move"},
        {"key": "bb", "folder": "birds", "action": "move"},
        {"folder": "birds", "action": "move"},
        "b=birds",
    ],
)
def test_reload_skips_invalid_records(config, record):
    """Test that one broken settings record does not hide the others."""
    config.set_shortcut_records([record, {"key": "d", "folder": "dogs", "action": "copy"}])

    registry = ShortcutRegistry(config)

    assert registry.keys() == ["d"]
    assert registry.get("d") == Shortcut("d", "dogs", Action.COPY)
