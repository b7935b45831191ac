# =============================================================================
# NAV INDEX (search these tags)
# [NAV-00] Imports / constants
# [NAV-10] Config model
# [NAV-20] Config loading / saving
# [NAV-90] Helpers
# [NAV-99] End
# =============================================================================

# === [NAV-00] Imports / constants ============================================
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("data/roaming/shell_config.json")
_DEFAULT_SHELL_CONFIG: Dict[str, Any] = {
    "app_title": "Workbench",
    "logo_image": "logo.png",
    "routes": {"images": "assets/images"},
    "toolbox_title": "Tool Box",
    "placeholder_text": "Unavailable tool",
}


# === [NAV-10] Config model ====================================================
@dataclass(frozen=True)
class ShellConfig:
    app_title: str = _DEFAULT_SHELL_CONFIG["app_title"]
    logo_image: str = _DEFAULT_SHELL_CONFIG["logo_image"]
    images_route: str = _DEFAULT_SHELL_CONFIG["routes"]["images"]
    toolbox_title: str = _DEFAULT_SHELL_CONFIG["toolbox_title"]
    placeholder_text: str = _DEFAULT_SHELL_CONFIG["placeholder_text"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app_title": self.app_title,
            "logo_image": self.logo_image,
            "routes": {"images": self.images_route},
            "toolbox_title": self.toolbox_title,
            "placeholder_text": self.placeholder_text,
        }


def config_from_dict(data: Dict[str, Any]) -> ShellConfig:
    routes = data.get("routes") if isinstance(data.get("routes"), dict) else {}
    defaults = ShellConfig()
    return ShellConfig(
        app_title=_str_or(data.get("app_title"), defaults.app_title),
        logo_image=_str_or(data.get("logo_image"), defaults.logo_image),
        images_route=_str_or(routes.get("images"), defaults.images_route),
        toolbox_title=_str_or(data.get("toolbox_title"), defaults.toolbox_title),
        placeholder_text=_str_or(data.get("placeholder_text"), defaults.placeholder_text),
    )


# === [NAV-20] Config loading / saving =========================================
def load_shell_config(path: Path = CONFIG_PATH) -> ShellConfig:
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(_DEFAULT_SHELL_CONFIG, indent=2), encoding="utf-8")
        return ShellConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("shell config unreadable (%s), using defaults: %s", path, exc)
        return ShellConfig()
    if not isinstance(data, dict):
        return ShellConfig()
    for key, value in _DEFAULT_SHELL_CONFIG.items():
        data.setdefault(key, value)
    return config_from_dict(data)


def save_shell_config(path: Path, config: ShellConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")


def logo_path(config: ShellConfig) -> str:
    return f"{config.images_route.rstrip('/')}/{config.logo_image}"


# === [NAV-90] Helpers =========================================================
def _str_or(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


# === [NAV-99] End =============================================================
__all__ = [
    "CONFIG_PATH",
    "ShellConfig",
    "config_from_dict",
    "load_shell_config",
    "save_shell_config",
    "logo_path",
]
