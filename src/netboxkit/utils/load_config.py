#!/usr/bin/env python3

import os
import json
import tomllib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class NetboxConfig:
    """NetBox client config.

    Attributes:
        url: NetBox base URL, without the ``/api`` suffix.
        token: NetBox API token.
        timeout: HTTP timeout in seconds.
        verify_ssl: Whether TLS certificates are verified.
    """

    url: str
    token: str
    timeout: float = 10
    verify_ssl: bool = True

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NetboxConfig":
        """Build config from a loaded ``[netbox]`` section.

        Args:
            data: Mapping with ``url`` and ``token`` keys.

        Returns:
            NetboxConfig: Parsed config.

        Raises:
            ValueError: ``url`` or ``token`` is missing.
        """
        url = str(data.get("url") or "").rstrip("/")
        token = str(data.get("token") or "")
        if not url:
            raise ValueError("netbox config requires url")
        if not token:
            raise ValueError("netbox config requires token")
        return cls(
            url=url,
            token=token,
            timeout=float(data.get("timeout", 10)),
            verify_ssl=bool(data.get("verify_ssl", True)),
        )


def _replace_values(data: Any) -> Any:
    """Recursively resolve placeholders in config values.

    Supported placeholder prefixes:
    - ``env,NAME``: value of environment variable ``NAME``

    Args:
        data: Config value to resolve.

    Returns:
        Any: Resolved value. Unresolvable placeholders are kept as-is.
    """
    if isinstance(data, dict):
        return {k: _replace_values(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_replace_values(item) for item in data]
    elif isinstance(data, str):
        # 处理 env,NAME 格式
        if data.startswith("env,"):
            parts = data.split(",", 1)
            env_value = os.getenv(parts[1].strip()) if len(parts) == 2 else None
            if env_value is not None:
                return env_value
        return data
    else:
        return data


def load_config_by_file(path: str, section: Optional[str] = None) -> Dict[str, Any]:
    """Load config from TOML/JSON and resolve supported placeholders.

    Args:
        path: Config file path. ``.toml`` files are read with ``tomllib``,
            anything else is parsed as JSON.
        section: Optional top-level key to return instead of the whole file.

    Returns:
        Dict[str, Any]: Loaded and resolved config.

    Raises:
        KeyError: ``section`` is not present in the file.
    """
    if path.endswith('.toml'):
        # tomllib 需要以二进制模式读取
        with open(path, 'rb') as f:
            config = tomllib.load(f)
    else:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)

    config = _replace_values(config)
    if section is not None:
        return config[section]
    return config
