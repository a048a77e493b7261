#!/usr/bin/env python3

"""Supported NetBox model kinds and their API paths / object types."""

from __future__ import annotations

from enum import Enum
from typing import Dict, NamedTuple, Optional, Union

INVALID_OBJECT_TYPE = "Invalid"


class ModelKind(str, Enum):
    """Closed set of model kinds the client can address."""

    SITE = "site"
    SITE_GROUP = "site-group"
    LOCATION = "location"
    DEVICE = "device"
    INTERFACE = "interface"
    VIRTUAL_MACHINE = "virtualmachine"
    VM_INTERFACE = "vminterface"
    CLUSTER = "cluster"
    CLUSTER_GROUP = "cluster-group"
    CLUSTER_TYPE = "cluster-type"
    IP_ADDRESS = "ipaddress"
    AGGREGATE = "aggregate"
    PREFIX = "prefix"
    IP_RANGE = "ip-range"
    TENANT = "tenant"
    TAG = "tag"
    JOURNAL_ENTRY = "journal-entry"
    CUSTOM_FIELD = "customfield"

    @classmethod
    def parse(cls, value: Union[str, "ModelKind"]) -> "ModelKind":
        """Resolve a kind from its name or one of its aliases.

        Args:
            value: Kind name, e.g. ``"device"`` or ``"ip-address"``.

        Returns:
            ModelKind: Matching kind.

        Raises:
            ValueError: The name is not a supported kind.
        """
        if isinstance(value, ModelKind):
            return value
        name = _ALIASES.get(value, value)
        return cls(name)

    @property
    def path(self) -> str:
        return _MODEL_TABLE[self].path

    @property
    def object_type(self) -> str:
        return _MODEL_TABLE[self].object_type


class _ModelInfo(NamedTuple):
    path: str
    object_type: str


_ALIASES: Dict[str, str] = {
    "ip-address": ModelKind.IP_ADDRESS.value,
    "custom-field": ModelKind.CUSTOM_FIELD.value,
    "journalentry": ModelKind.JOURNAL_ENTRY.value,
    "sitegroup": ModelKind.SITE_GROUP.value,
}

_MODEL_TABLE: Dict[ModelKind, _ModelInfo] = {
    ModelKind.SITE: _ModelInfo("/dcim/sites", "dcim.site"),
    ModelKind.SITE_GROUP: _ModelInfo("/dcim/site-groups", "dcim.sitegroup"),
    ModelKind.LOCATION: _ModelInfo("/dcim/locations", "dcim.location"),
    ModelKind.DEVICE: _ModelInfo("/dcim/devices", "dcim.device"),
    ModelKind.INTERFACE: _ModelInfo("/dcim/interfaces", "dcim.interface"),
    ModelKind.VIRTUAL_MACHINE: _ModelInfo(
        "/virtualization/virtual-machines", "virtualization.virtualmachine"
    ),
    ModelKind.VM_INTERFACE: _ModelInfo("/virtualization/interfaces", "virtualization.vminterface"),
    ModelKind.CLUSTER: _ModelInfo("/virtualization/clusters", "virtualization.cluster"),
    ModelKind.CLUSTER_GROUP: _ModelInfo("/virtualization/cluster-groups", "virtualization.clustergroup"),
    ModelKind.CLUSTER_TYPE: _ModelInfo("/virtualization/cluster-types", "virtualization.clustertype"),
    ModelKind.IP_ADDRESS: _ModelInfo("/ipam/ip-addresses", "ipam.ipaddress"),
    ModelKind.AGGREGATE: _ModelInfo("/ipam/aggregates", "ipam.aggregate"),
    ModelKind.PREFIX: _ModelInfo("/ipam/prefixes", "ipam.prefix"),
    ModelKind.IP_RANGE: _ModelInfo("/ipam/ip-ranges", "ipam.iprange"),
    ModelKind.TENANT: _ModelInfo("/tenancy/tenants", "tenancy.tenant"),
    ModelKind.TAG: _ModelInfo("/extras/tags", "extras.tag"),
    ModelKind.JOURNAL_ENTRY: _ModelInfo("/extras/journal-entries", "extras.journalentry"),
    ModelKind.CUSTOM_FIELD: _ModelInfo("/extras/custom-fields", "extras.customfield"),
}

# Parent discriminator accepted by interface operations -> interface kind.
INTERFACE_PARENTS: Dict[str, ModelKind] = {
    ModelKind.DEVICE.value: ModelKind.INTERFACE,
    ModelKind.VIRTUAL_MACHINE.value: ModelKind.VM_INTERFACE,
}


def resolve_kind(value: Union[str, ModelKind, None]) -> Optional[ModelKind]:
    """Resolve a kind, returning ``None`` for unsupported names.

    Args:
        value: Kind name or :class:`ModelKind`.

    Returns:
        Optional[ModelKind]: Matching kind or ``None``.
    """
    if value is None:
        return None
    try:
        return ModelKind.parse(value)
    except ValueError:
        return None


def get_path_for_model(value: Union[str, ModelKind, None]) -> str:
    """Get the API path (without ``/api``) for a model kind.

    Args:
        value: Kind name or :class:`ModelKind`.

    Returns:
        str: Path such as ``/dcim/devices``; empty string when unsupported.
    """
    kind = resolve_kind(value)
    return kind.path if kind is not None else ""


def get_object_type(value: Union[str, ModelKind, None]) -> str:
    """Get the qualified ``<app>.<model>`` object type for a model kind.

    Args:
        value: Kind name or :class:`ModelKind`.

    Returns:
        str: Object type such as ``dcim.device``; ``"Invalid"`` when unsupported.
    """
    kind = resolve_kind(value)
    return kind.object_type if kind is not None else INVALID_OBJECT_TYPE
