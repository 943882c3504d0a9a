#!/usr/bin/env python3
"""
Tests for the module registry
"""

import pytest

from deployment.descriptor import build_module
from deployment.errors import DuplicateModuleName
from deployment.modules.switch_assets import build_switch_assets_module
from deployment.registry import ModuleRegistry


class TestModuleRegistry:
    """Test class for ModuleRegistry"""

    def test_register_and_get(self):
        """Test a built module can be looked up by name"""
        registry = ModuleRegistry()
        module = build_switch_assets_module(registry)

        assert "SwitchAssetsModule" in registry
        assert registry.get("SwitchAssetsModule") is module
        assert registry.names() == ["SwitchAssetsModule"]
        assert len(registry) == 1
        assert list(registry) == [module]

    def test_duplicate_name_fails(self):
        """Test building SwitchAssetsModule twice in one run fails"""
        registry = ModuleRegistry()
        build_switch_assets_module(registry)

        with pytest.raises(DuplicateModuleName, match="SwitchAssetsModule"):
            build_switch_assets_module(registry)
        assert len(registry) == 1

    def test_duplicate_detected_before_callback_runs(self):
        """Test the second callback is never invoked"""
        registry = ModuleRegistry()
        registry.build("A", lambda m: {})
        calls = []

        with pytest.raises(DuplicateModuleName):
            registry.build("A", lambda m: calls.append(m))
        assert calls == []

    def test_duplicate_regardless_of_content(self):
        """Test only name equality matters, in either registration order"""
        first = build_module("Same", lambda m: {"a": m.contract("A")})
        second = build_module("Same", lambda m: {"b": m.contract("B")})

        for modules in ([first, second], [second, first]):
            registry = ModuleRegistry()
            registry.register(modules[0])
            with pytest.raises(DuplicateModuleName):
                registry.register(modules[1])

    def test_distinct_names_coexist(self):
        """Test different names register independently"""
        registry = ModuleRegistry()
        registry.build("A", lambda m: {})
        registry.build("B", lambda m: {})
        assert registry.names() == ["A", "B"]

    def test_get_unknown(self):
        """Test missing modules raise KeyError naming the module"""
        registry = ModuleRegistry()
        with pytest.raises(KeyError, match="Missing"):
            registry.get("Missing")

    def test_context_manager_clears(self):
        """Test leaving a run clears the registry so names can be reused"""
        registry = ModuleRegistry()
        with registry as run:
            build_switch_assets_module(run)
            assert len(run) == 1
        assert len(registry) == 0

        build_switch_assets_module(registry)
        assert "SwitchAssetsModule" in registry

    def test_separate_registries_do_not_leak(self):
        """Test two runs do not share module names"""
        build_switch_assets_module(ModuleRegistry())
        build_switch_assets_module(ModuleRegistry())
