# File: helpers/__init__.py
"""Home Assistant-bound helper functions for QuestCraft.

This module contains functions that REQUIRE Home Assistant dependencies.

NOTE: Functions that need `hass` or HA types belong here, NOT in utils/.

Submodules:
    - entity_helpers: Dispatcher signal names, item lookups
    - device_helpers: DeviceInfo construction
    - flow_helpers: Config/options flow schemas and validators

Usage:
    from .helpers.entity_helpers import get_event_signal
    from .helpers import flow_helpers as fh
"""

from . import device_helpers, entity_helpers, flow_helpers

__all__ = [
    "device_helpers",
    "entity_helpers",
    "flow_helpers",
]
