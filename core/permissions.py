# ============================================
# MODULE / ACTION CATALOGUE
# ============================================
from typing import Dict, List, Optional, Union

from models.enums import ActionKey, ModuleKey


# Labels shown by the console for each module / action
MODULE_CONFIG: List[Dict[str, str]] = [
    {"key": ModuleKey.campaign.value, "label": "Campaigns"},
    {"key": ModuleKey.properties.value, "label": "Properties"},
    {"key": ModuleKey.user_management.value, "label": "User Management"},
]

ACTION_CONFIG: List[Dict[str, str]] = [
    {"key": ActionKey.add.value, "label": "Add"},
    {"key": ActionKey.view.value, "label": "View"},
    {"key": ActionKey.edit.value, "label": "Edit"},
    {"key": ActionKey.delete.value, "label": "Delete"},
]

MODULE_KEYS: List[str] = ModuleKey.list()
ACTION_KEYS: List[str] = ActionKey.list()


# =====================================================
# WIRE KEY ALIASES
# The API uses "properties"; "property" is a legacy alias.
# =====================================================
MODULE_ALIASES: Dict[str, str] = {
    "campaign": ModuleKey.campaign.value,
    "properties": ModuleKey.properties.value,
    "property": ModuleKey.properties.value,
    "user_management": ModuleKey.user_management.value,
}

# Shorthands accepted from callers (routes, screens)
MODULE_SHORTHANDS: Dict[str, str] = {
    "users": ModuleKey.user_management.value,
    "property": ModuleKey.properties.value,
}


def resolve_module_key(module: Union[ModuleKey, str]) -> str:
    """Map caller shorthands ("users", "property") onto canonical module keys."""
    key = module.value if isinstance(module, ModuleKey) else str(module)
    return MODULE_SHORTHANDS.get(key, key)


def canonical_module(raw_key: str) -> Optional[str]:
    """Canonical module for a wire key, or None when the key is unknown."""
    return MODULE_ALIASES.get(raw_key)
