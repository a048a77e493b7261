#!/usr/bin/env python3

"""Typed records for NetBox API payloads.

Only the fields the client reads or writes are declared; any other field in
a response is ignored.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..utils.parse import Parse


class NetboxModel(BaseModel):
    """Base record, tolerant of extra remote fields.

    A ``null`` sent for a field whose default is not ``None`` (for example the
    name of an unnamed device) falls back to that default.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _null_to_default(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        fields = cls.model_fields
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in fields or fields[key].default is None
        }


class JournalKind(str, Enum):
    """Severity of a journal entry."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class DisplayIDName(NetboxModel):
    """Nested reference to another object."""

    id: int = 0
    url: str = ""
    display: str = ""
    name: str = ""
    slug: str = ""


class LabelValue(NetboxModel):
    label: str = ""
    value: Any = None


class Tag(NetboxModel):
    id: int = 0
    name: str = ""
    slug: str = ""
    color: str = ""


class Tenant(NetboxModel):
    id: int = 0
    url: str = ""
    name: str = ""
    slug: str = ""
    description: str = ""
    group: Optional[DisplayIDName] = None
    tags: List[Tag] = Field(default_factory=list)


class SiteGroup(NetboxModel):
    id: int = 0
    name: str = ""
    slug: str = ""
    description: str = ""
    tags: List[Tag] = Field(default_factory=list)


class Site(NetboxModel):
    id: int = 0
    url: str = ""
    name: str = ""
    slug: str = ""
    status: Optional[LabelValue] = None
    tenant: Optional[DisplayIDName] = None
    group: Optional[DisplayIDName] = None
    physical_address: str = ""
    description: str = ""
    tags: List[Tag] = Field(default_factory=list)
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class Location(NetboxModel):
    id: int = 0
    url: str = ""
    name: str = ""
    slug: str = ""
    site: Optional[DisplayIDName] = None
    status: Optional[LabelValue] = None
    tags: List[Tag] = Field(default_factory=list)


class PrimaryIP(NetboxModel):
    id: int = 0
    url: str = ""
    address: str = ""
    display: str = ""
    family: Any = None


class DeviceOrVM(NetboxModel):
    """A device or virtual machine; both share the fields below."""

    id: int = 0
    url: str = ""
    name: Optional[str] = None
    display: str = ""
    description: str = ""
    comments: str = ""
    serial: str = ""
    asset_tag: Optional[str] = None
    site: Optional[DisplayIDName] = None
    role: Optional[DisplayIDName] = None
    device_role: Optional[DisplayIDName] = None
    status: Optional[LabelValue] = None
    primary_ip: Optional[PrimaryIP] = None
    primary_ip4: Optional[PrimaryIP] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    memory: Optional[int] = None
    disk: Optional[int] = None
    vcpus: Optional[float] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    object_type: str = ""

    @property
    def monitoring_id(self) -> Optional[int]:
        """``monitoring_id`` custom field, when it holds an integer."""
        value = self.custom_fields.get("monitoring_id")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return None


class MonitoredObject(NetboxModel):
    id: int = 0
    url: str = ""
    object_type: str = ""


class MAC(NetboxModel):
    id: int = 0
    url: str = ""
    mac_address: Optional[str] = None


class Interface(NetboxModel):
    id: int = 0
    url: str = ""
    name: str = ""
    display: str = ""
    description: str = ""
    label: str = ""
    enabled: bool = True
    mgmt_only: bool = False
    device: Optional[DisplayIDName] = None
    virtual_machine: Optional[DisplayIDName] = None
    type: Optional[LabelValue] = None
    speed: Optional[int] = None
    duplex: Optional[LabelValue] = None
    mtu: Optional[int] = None
    parent: Optional[DisplayIDName] = None
    primary_mac_address: Optional[MAC] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)

    def get_speed(self) -> int:
        return self.speed or 0

    def get_duplex(self) -> str:
        if self.duplex is None or self.duplex.value is None:
            return "auto"
        return str(self.duplex.value)

    def get_mac_address(self) -> str:
        if self.primary_mac_address is None:
            return ""
        return self.primary_mac_address.mac_address or ""


class InterfaceEdit(NetboxModel):
    """Body used to create or update an interface.

    Unset fields are left out of the request so an update never clears
    values it did not mean to touch.
    """

    name: Optional[str] = None
    device: Optional[int] = None
    virtual_machine: Optional[int] = None
    type: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    duplex: Optional[str] = None
    speed: Optional[int] = None
    parent: Optional[int] = None
    primary_mac_address: Optional[int] = None

    def set_speed(self, speed: int) -> bool:
        """Set speed in kbps. Returns True when the value is changed."""
        if not speed:
            return False
        self.speed = speed
        return True

    def set_duplex(self, duplex: Optional[str]) -> bool:
        """Set duplex from a raw ``full-duplex``/``half``/... value."""
        normalized = Parse.normalize_duplex(duplex)
        if normalized is None:
            return False
        self.duplex = normalized
        return True

    def set_mac(self, mac_id: int) -> bool:
        self.primary_mac_address = mac_id
        return True

    def set_name(self, name: str) -> bool:
        self.name = name
        return True

    def set_parent(self, parent: int) -> bool:
        if not parent:
            return False
        self.parent = parent
        return True

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class IPAddress(NetboxModel):
    id: int = 0
    url: str = ""
    address: str = ""
    dns_name: str = ""
    description: str = ""
    status: Optional[LabelValue] = None
    assigned_object_type: Optional[str] = None
    assigned_object_id: Optional[int] = None
    tenant: Optional[DisplayIDName] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class ClusterGroup(NetboxModel):
    id: int = 0
    url: str = ""
    name: str = ""
    slug: str = ""
    description: str = ""
    cluster_count: int = 0
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class ClusterType(NetboxModel):
    id: int = 0
    url: str = ""
    name: str = ""
    slug: str = ""
    description: str = ""


class Cluster(NetboxModel):
    id: int = 0
    url: str = ""
    name: str = ""
    description: str = ""
    comments: str = ""
    type: Optional[DisplayIDName] = None
    group: Optional[DisplayIDName] = None
    site: Optional[DisplayIDName] = None
    tenant: Optional[DisplayIDName] = None
    status: Optional[LabelValue] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class JournalEntry(NetboxModel):
    id: int = 0
    assigned_object_type: str = ""
    assigned_object_id: int = 0
    kind: Optional[LabelValue] = None
    comments: str = ""


class CustomField(NetboxModel):
    id: int = 0
    name: str = ""
    label: str = ""
    type: Optional[LabelValue] = None
    object_types: List[str] = Field(default_factory=list)
