"""Tests for PluginManager — discovery, registration, and hook relay."""

from __future__ import annotations

import pytest

from profsplit.plugins import PluginManager, hookimpl


class _DummyPlugin:
    """Minimal plugin for registration tests."""

    def __init__(self) -> None:
        self.calls: list[int] = []

    @hookimpl
    def post_migrate_order(self, order_id: int, order_type: str) -> None:
        self.calls.append(order_id)


class _NoHooks:
    pass


class TestPluginManager:
    """Tests for the PluginManager class."""

    def test_register_plugin(self):
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin(), name="dummy")
        assert "dummy" in pm.list_plugin_names()

    def test_register_plugin_default_name(self):
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert "_DummyPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self):
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="dummy")
        pm.unregister(plugin)
        assert "dummy" not in pm.list_plugin_names()

    def test_is_loaded_false_before_discover(self):
        pm = PluginManager()
        assert pm.is_loaded is False

    def test_discover_marks_loaded(self):
        pm = PluginManager()
        pm.discover_and_load()
        assert pm.is_loaded is True

    def test_get_plugins_returns_registered(self):
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="test")
        assert plugin in pm.get_plugins()

    def test_hook_dispatch(self):
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin)
        pm.hook.post_migrate_order(order_id=7, order_type="default")
        assert plugin.calls == [7]


class TestNormalizePluginInstances:
    def test_class_with_hooks_is_instantiated(self):
        pm = PluginManager()
        pm._pm.register(_DummyPlugin, name="dummy")

        pm._normalize_plugin_instances()

        (plugin,) = pm.get_plugins()
        assert isinstance(plugin, _DummyPlugin)
        assert pm.list_plugin_names() == ["dummy"]

    def test_class_without_hooks_left_alone(self):
        pm = PluginManager()
        pm._pm.register(_NoHooks, name="plain")
        pm._normalize_plugin_instances()
        assert pm.get_plugins() == [_NoHooks]

    def test_has_hook_impls(self):
        assert PluginManager._has_hook_impls(_DummyPlugin) is True
        assert PluginManager._has_hook_impls(_NoHooks) is False


@pytest.mark.parametrize(
    "hook_name",
    ["post_provision", "post_migrate_order", "post_migrate_batch", "post_mode_change"],
)
def test_all_hookspecs_registered(hook_name: str):
    """All lifecycle hookspecs should be available on the hook relay."""
    assert hasattr(PluginManager().hook, hook_name)
