"""
Deployment Modules
==================

Module definitions shipped with the project:
- SwitchAssetsModule: deploys the SwitchAssets asset registry
"""

from .switch_assets import build_switch_assets_module

# Builders called by the CLI, in load order
MODULES = [build_switch_assets_module]

__all__ = ['MODULES', 'build_switch_assets_module']
