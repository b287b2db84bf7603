#!/usr/bin/env python3
# ======================================================================
#  Config Service - Configuration loading and caching
#  - Loads config from built-in defaults, YAML files, overrides, env vars
#  - Caches composed config for performance
#  - Provides reload() for runtime changes
# ======================================================================

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from easel.__version__ import __version__
from easel.helpers.dto.rebuild_dto import RebuildSettings

ENV_PREFIX = "EASEL_"
SEED_DIR = str(Path(__file__).resolve().parent.parent.parent / "data" / "seed")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def is_truthy(value: Any) -> bool:
    """Boolean-like parsing: 1/true/yes/on (any case) are true, everything else false."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


class ConfigService:
    """
    Service for loading and caching application configuration.

    Loads config from multiple sources (defaults → YAML → overrides → env),
    caches the result, and provides reload capability.
    """

    def __init__(self, overrides: dict[str, Any] | None = None) -> None:
        """Initialize ConfigService with empty cache.

        Args:
            overrides: Values applied on top of YAML files (below env vars)
        """
        self._overrides = overrides or {}
        self._config: dict[str, Any] | None = None
        self._logger = logging.getLogger(__name__)

    def get_config(self, force_reload: bool = False) -> dict[str, Any]:
        """
        Get the composed configuration.

        Args:
            force_reload: If True, bypass cache and reload from sources

        Returns:
            Complete configuration dict
        """
        if self._config is None or force_reload:
            self._config = self._compose()
        return self._config

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dotted path.

        Example:
            >>> service.get("rebuild.cooldown_s")
            10
        """
        node: Any = self.get_config()
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def reload(self) -> dict[str, Any]:
        """Force reload configuration from all sources."""
        self._logger.info("Reloading configuration from all sources")
        return self.get_config(force_reload=True)

    def use_mongodb(self) -> bool:
        """Whether the networked backend should be attempted first."""
        return is_truthy(self.get("use_mongodb"))

    def make_rebuild_settings(self) -> RebuildSettings:
        """
        Build RebuildSettings from the current configuration.

        This is the boundary where rebuild-specific values are extracted and
        validated before injection into the RebuildOrchestrator.
        """
        section = self.get_config()["rebuild"]
        root_dir = os.path.abspath(section.get("root_dir") or os.getcwd())
        output_root = section.get("output_root") or "dist"
        if not os.path.isabs(output_root):
            output_root = os.path.join(root_dir, output_root)
        commands = section.get("commands") or []
        if isinstance(commands, str):
            commands = [commands]
        timeout = section.get("command_timeout_s")
        return RebuildSettings(
            root_dir=root_dir,
            output_root=output_root,
            live_dir_name=str(section.get("live_dir_name") or "public"),
            staging_suffix=str(section.get("staging_suffix") or ".new"),
            backup_suffix=str(section.get("backup_suffix") or ".old"),
            commands=[str(c) for c in commands],
            cooldown_s=float(section.get("cooldown_s", 10)),
            cleanup_delay_s=float(section.get("cleanup_delay_s", 5)),
            command_timeout_s=float(timeout) if timeout else None,
            enabled=is_truthy(section.get("enabled", True)),
        )

    # ----------------------------------------------------------------------
    # Private composition logic
    # ----------------------------------------------------------------------

    def _compose(self) -> dict[str, Any]:
        """
        Load final configuration from:
          1) Built-in defaults
          2) /etc/easel/config.yaml  (if present)
          3) ./config/config.yaml
          4) $EASEL_CONFIG_PATH (if set)
          5) overrides dict passed to the constructor
          6) Environment variables (EASEL_KEY / EASEL_SECTION__KEY)

        Returns merged config as dict.
        """
        cfg = self._default_config()

        self._deep_merge(cfg, self._load_yaml("/etc/easel/config.yaml"))
        self._deep_merge(cfg, self._load_yaml(os.path.join(os.getcwd(), "config", "config.yaml")))

        env_path = os.getenv(f"{ENV_PREFIX}CONFIG_PATH")
        if env_path:
            self._deep_merge(cfg, self._load_yaml(env_path))

        if self._overrides:
            self._deep_merge(cfg, self._overrides)

        self._apply_env_overrides(cfg)

        with contextlib.suppress(Exception):
            self._logger.debug("compose() loaded config; keys: %s", list(cfg.keys()))

        return cfg

    def _default_config(self) -> dict[str, Any]:
        """
        Base defaults; all fields present so no KeyErrors downstream.
        """
        return {
            "version": __version__,
            # Storage backend selection
            "use_mongodb": False,
            "mongodb_uri": "mongodb://localhost:27017/easel",
            "mongodb_database": None,  # Falls back to the URI's database
            "mongodb_timeout_ms": 5000,
            "data_dir": os.path.join("data", "nedb"),
            # First-run content
            "seed_sample_data": True,
            "seed_dir": SEED_DIR,
            # Admin bootstrap and sessions
            "admin_email": "admin@example.com",
            "admin_password": None,  # Optional; auto-generated if not set
            "session_timeout_s": 7 * 24 * 60 * 60,
            # HTTP server
            "host": "0.0.0.0",
            "port": 5000,
            "serve_site": True,
            # Admin image uploads (served at /attached_assets)
            "assets_dir": "attached_assets",
            "upload_max_bytes": 10 * 1024 * 1024,
            # Static site rebuilds
            "rebuild": {
                "enabled": True,
                "root_dir": None,  # Defaults to the working directory
                "output_root": "dist",
                "live_dir_name": "public",
                "staging_suffix": ".new",
                "backup_suffix": ".old",
                "commands": [
                    "npx vite build --outDir {output_dir}",
                    "npx tsx scripts/prerender-ssr.tsx {output_dir}",
                ],
                "cooldown_s": 10,
                "cleanup_delay_s": 5,
                "command_timeout_s": None,
            },
        }

    def _deep_merge(self, a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
        """
        Recursively merge dict b into dict a (mutates a, returns it).
        """
        for k, v in b.items():
            if isinstance(v, dict) and isinstance(a.get(k), dict):
                self._deep_merge(a[k], v)
            else:
                a[k] = v
        return a

    def _load_yaml(self, path: str) -> dict[str, Any]:
        """
        Load a YAML file; returns {} if not found or invalid.
        """
        if not path or not os.path.exists(path):
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self._logger.warning(f"Ignoring unreadable config file {path}: {e}")
            return {}
        if not isinstance(data, dict):
            self._logger.warning(f"Ignoring config file {path}: top level is not a mapping")
            return {}
        return data

    def _apply_env_overrides(self, cfg: dict[str, Any]) -> None:
        """
        Support environment overrides of the form:
          EASEL_USE_MONGODB=true
          EASEL_MONGODB_URI=mongodb://db:27017/easel
          EASEL_REBUILD__COOLDOWN_S=30
        """
        for k, v in os.environ.items():
            if not k.startswith(ENV_PREFIX) or k == f"{ENV_PREFIX}CONFIG_PATH":
                continue
            path = k[len(ENV_PREFIX) :].lower().split("__")
            if not all(path):
                continue

            val: Any
            if v.lower() in ("true", "false"):
                val = v.lower() == "true"
            elif v.isdigit():
                val = int(v)
            else:
                val = v

            node = cfg
            for part in path[:-1]:
                child = node.get(part)
                if not isinstance(child, dict):
                    child = {}
                    node[part] = child
                node = child
            node[path[-1]] = val
