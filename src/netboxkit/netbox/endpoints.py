#!/usr/bin/env python3

"""Per-app operation groups of the NetBox client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional, Sequence, Type, Union

from pydantic import BaseModel

from ..schemas.codes import RespCode
from ..schemas.netbox import (
    Cluster,
    ClusterGroup,
    ClusterType,
    CustomField,
    DeviceOrVM,
    Interface,
    InterfaceEdit,
    IPAddress,
    JournalEntry,
    JournalKind,
    Location,
    MonitoredObject,
    Site,
    SiteGroup,
    Tag,
    Tenant,
)
from ..schemas.response import ReturnResponse
from ..utils.parse import Parse
from .kinds import INTERFACE_PARENTS, INVALID_OBJECT_TYPE, ModelKind, get_object_type, resolve_kind

if TYPE_CHECKING:
    from .client import NetboxClient

TagLike = Union[Tag, Dict[str, Any], str]
SiteStatus = Literal["planned", "staging", "active", "decommissioning", "retired"]


class Endpoint:

    """Base of an operation group; all IO goes through ``parent``."""

    def __init__(self, parent: "NetboxClient") -> None:
        self.parent = parent

    def _find_one(self, model: Type[BaseModel], kind: ModelKind, *args: str) -> ReturnResponse:
        return self.parent._to_record(self.parent._search_one(kind, *args), model)

    def _find_all(self, model: Type[BaseModel], kind: ModelKind, *args: str) -> ReturnResponse:
        return self.parent._to_records(self.parent.search_all(kind, *args), model)

    def _get_record(self, model: Type[BaseModel], kind: ModelKind, object_id: int) -> ReturnResponse:
        return self.parent._to_record(self.parent.get_by_id(kind, object_id), model)

    def _add_record(self, model: Type[BaseModel], kind: ModelKind, payload: Dict[str, Any]) -> ReturnResponse:
        return self.parent._to_record(self.parent.add_object(kind, payload), model)

    @staticmethod
    def _tag_refs(tags: Optional[Sequence[TagLike]]) -> Optional[List[Dict[str, Any]]]:
        """Turn tags into nested references accepted by the API.

        Args:
            tags: ``Tag`` records, ready-made dicts, or tag slugs.

        Returns:
            Optional[list[dict]]: References, or ``None`` when no tags given.
        """
        if tags is None:
            return None
        refs: List[Dict[str, Any]] = []
        for tag in tags:
            if isinstance(tag, Tag):
                refs.append({"name": tag.name, "slug": tag.slug})
            elif isinstance(tag, dict):
                refs.append(tag)
            else:
                refs.append({"slug": str(tag)})
        return refs


class DcimEndpoint(Endpoint):

    """Sites, site groups, locations, devices and interfaces."""

    def get_site(self, site_id: int) -> ReturnResponse:
        """Get a site by ID.

        Args:
            site_id: Site ID.

        Returns:
            ReturnResponse: ``Site`` in ``data``.
        """
        return self._get_record(Site, ModelKind.SITE, site_id)

    def find_site(self, name: str) -> ReturnResponse:
        """Find a site by name, falling back to the slug of the name.

        Args:
            name: Site name.

        Returns:
            ReturnResponse: ``Site`` in ``data``; ``NOT_FOUND`` or
            ``AMBIGUOUS_RESULT`` otherwise.
        """
        by_name = self._find_one(Site, ModelKind.SITE, Parse.query_term("name", name))
        if by_name.code != RespCode.NOT_FOUND:
            return by_name
        return self._find_one(Site, ModelKind.SITE, Parse.query_term("slug", Parse.slugify(name)))

    def get_site_id(self, name: str) -> ReturnResponse:
        """Get site ID by name.

        Args:
            name: Site name.

        Returns:
            ReturnResponse: Site ID in ``data``.
        """
        response = self.find_site(name)
        if response.code != 0:
            return response
        return self.parent._ok(msg=response.msg, data=response.data.id)

    def _resolve_tenant_id(self, tenant: Union[int, str, None]) -> ReturnResponse:
        """Resolve a tenant reference to an ID; names go through the tenant reconciler."""
        if tenant is None or isinstance(tenant, int):
            return self.parent._ok(msg="tenant id given", data=tenant)
        response = self.parent.tenancy.get_or_add_tenant(tenant)
        if response.code != 0:
            return response
        return self.parent._ok(msg=response.msg, data=response.data.id)

    def add_site(
        self,
        name: str,
        slug: Optional[str] = None,
        status: SiteStatus = "active",
        tenant: Union[int, str, None] = None,
        group: Optional[int] = None,
        physical_address: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[TagLike]] = None,
        custom_fields: Optional[Dict[str, Any]] = None,
    ) -> ReturnResponse:
        """Create a site.

        Args:
            name: Site name.
            slug: Site slug; derived from ``name`` when omitted.
            status: Site status.
            tenant: Tenant ID, or tenant name resolved with get-or-add.
            group: Site group ID.
            physical_address: Physical address.
            description: Description text.
            tags: Tags to attach.
            custom_fields: Custom field values.

        Returns:
            ReturnResponse: Created ``Site`` in ``data``.
        """
        tenant_id_response = self._resolve_tenant_id(tenant)
        if tenant_id_response.code != 0:
            return tenant_id_response

        payload = Parse.remove_dict_none_value(
            {
                "name": name,
                "slug": slug or Parse.slugify(name),
                "status": status,
                "tenant": tenant_id_response.data,
                "group": group,
                "physical_address": physical_address,
                "description": description,
                "tags": self._tag_refs(tags),
                "custom_fields": custom_fields,
            }
        )
        response = self._add_record(Site, ModelKind.SITE, payload)
        if response.code == 0:
            self.parent.logger.info("added site: %s %s", response.data.id, name)
        return response

    def get_or_add_site(
        self,
        name: str,
        slug: Optional[str] = None,
        tenant: Union[int, str, None] = None,
        group: Optional[int] = None,
        physical_address: Optional[str] = None,
        tags: Optional[Sequence[TagLike]] = None,
        custom_fields: Optional[Dict[str, Any]] = None,
    ) -> ReturnResponse:
        """Return the site named ``name``, creating it when absent.

        A ``physical_address`` already seen by this client returns the
        cached site without searching.

        Args:
            name: Site name.
            slug: Slug used on creation.
            tenant: Tenant ID or name used on creation.
            group: Site group ID used on creation.
            physical_address: Physical address; also the cache key.
            tags: Tags used on creation.
            custom_fields: Custom fields used on creation.

        Returns:
            ReturnResponse: ``Site`` in ``data``.
        """
        if physical_address:
            cached_id = self.parent._cached_site_id(physical_address)
            if cached_id is not None:
                return self.get_site(cached_id)

        response = self.parent._get_or_add(
            ModelKind.SITE,
            name,
            search=lambda: self.find_site(name),
            add=lambda: self.add_site(
                name=name,
                slug=slug,
                tenant=tenant,
                group=group,
                physical_address=physical_address,
                tags=tags,
                custom_fields=custom_fields,
            ),
        )
        if response.code == 0 and physical_address:
            self.parent._cache_site_id(physical_address, response.data.id)
        return response

    def add_or_update_site(
        self,
        name: str,
        slug: Optional[str] = None,
        status: Optional[SiteStatus] = None,
        tenant: Union[int, str, None] = None,
        group: Optional[int] = None,
        physical_address: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[TagLike]] = None,
    ) -> ReturnResponse:
        """Create a site, or PATCH the given fields onto the existing one.

        Args:
            name: Site name.
            slug: Site slug.
            status: Site status; ``active`` on creation when omitted.
            tenant: Tenant ID or name.
            group: Site group ID.
            physical_address: Physical address.
            description: Description text.
            tags: Tags; replaces the site's tags when given.

        Returns:
            ReturnResponse: ``Site`` in ``data``.
        """
        site_response = self.find_site(name)
        if site_response.code == RespCode.NOT_FOUND:
            return self.add_site(
                name=name,
                slug=slug,
                status=status or "active",
                tenant=tenant,
                group=group,
                physical_address=physical_address,
                description=description,
                tags=tags,
            )
        if site_response.code != 0:
            return site_response

        tenant_id_response = self._resolve_tenant_id(tenant)
        if tenant_id_response.code != 0:
            return tenant_id_response

        payload = Parse.remove_dict_none_value(
            {
                "slug": slug,
                "status": status,
                "tenant": tenant_id_response.data,
                "group": group,
                "physical_address": physical_address,
                "description": description,
                "tags": self._tag_refs(tags),
            }
        )
        if not payload:
            return self.parent._ok(msg=f"site [{name}] unchanged", data=site_response.data)

        response = self.parent.update_object(ModelKind.SITE, site_response.data.id, payload)
        if response.code != 0:
            return self.parent._fail(code=response.code, msg=f"site [{name}] updated failed", data=response.data)
        return self.parent._to_record(response, Site)

    def get_site_group(self, slug: str) -> ReturnResponse:
        """Find a site group by slug."""
        return self._find_one(SiteGroup, ModelKind.SITE_GROUP, Parse.query_term("slug", slug))

    def add_site_group(
        self,
        name: str,
        slug: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[TagLike]] = None,
    ) -> ReturnResponse:
        payload = Parse.remove_dict_none_value(
            {
                "name": name,
                "slug": slug or Parse.slugify(name),
                "description": description,
                "tags": self._tag_refs(tags),
            }
        )
        return self._add_record(SiteGroup, ModelKind.SITE_GROUP, payload)

    def get_or_add_site_group(
        self,
        name: str,
        slug: Optional[str] = None,
        tags: Optional[Sequence[TagLike]] = None,
    ) -> ReturnResponse:
        """Return the site group with ``slug`` (default: slug of ``name``), creating it when absent.

        Args:
            name: Group name.
            slug: Group slug.
            tags: Tags used on creation.

        Returns:
            ReturnResponse: ``SiteGroup`` in ``data``.
        """
        resolved_slug = slug or Parse.slugify(name)
        return self.parent._get_or_add(
            ModelKind.SITE_GROUP,
            resolved_slug,
            search=lambda: self.get_site_group(resolved_slug),
            add=lambda: self.add_site_group(name=name, slug=resolved_slug, tags=tags),
        )

    def add_location(
        self,
        site: int,
        name: str,
        slug: Optional[str] = None,
        status: SiteStatus = "active",
        tags: Optional[Sequence[TagLike]] = None,
        comments: Optional[str] = None,
    ) -> ReturnResponse:
        """Create a location under a site.

        ``comments`` are written as an ``info`` journal entry on the new
        location. A failed journal write is logged and does not fail the call.

        Args:
            site: Parent site ID.
            name: Location name.
            slug: Location slug; derived from ``name`` when omitted.
            status: Location status.
            tags: Tags to attach.
            comments: Optional journal text.

        Returns:
            ReturnResponse: Created ``Location`` in ``data``.
        """
        payload = Parse.remove_dict_none_value(
            {
                "name": name,
                "slug": slug or Parse.slugify(name),
                "site": site,
                "status": status,
                "tags": self._tag_refs(tags),
            }
        )
        response = self._add_record(Location, ModelKind.LOCATION, payload)
        if response.code != 0:
            return response

        self.parent.logger.info("added location %s %s", response.data.id, name)
        if comments:
            journal_response = self.parent.extras.add_journal_entry(
                ModelKind.LOCATION,
                response.data.id,
                comments,
                level=JournalKind.INFO,
            )
            if journal_response.code != 0:
                self.parent.logger.warning(
                    "location [%s] journal entry failed: %s", name, journal_response.msg
                )
        return response

    def _check_device_or_vm_kind(self, kind: Union[str, ModelKind]) -> ReturnResponse:
        resolved = resolve_kind(kind)
        if resolved not in (ModelKind.DEVICE, ModelKind.VIRTUAL_MACHINE):
            return self.parent._fail(
                code=RespCode.CONFIGURATION_ERROR,
                msg=f"model [{kind}] is not a device or virtualmachine",
            )
        return self.parent._ok(msg="kind resolved", data=resolved)

    def get_device_or_vm(self, kind: Union[str, ModelKind], object_id: int) -> ReturnResponse:
        """Get a device or virtual machine by ID.

        Args:
            kind: ``device`` or ``virtualmachine``.
            object_id: Object ID.

        Returns:
            ReturnResponse: ``DeviceOrVM`` in ``data``.
        """
        kind_response = self._check_device_or_vm_kind(kind)
        if kind_response.code != 0:
            return kind_response
        response = self._get_record(DeviceOrVM, kind_response.data, object_id)
        if response.code == 0:
            response.data.object_type = kind_response.data.value
        return response

    def get_device_or_vm_by_url(self, url: str) -> ReturnResponse:
        """Get a device or virtual machine from its ``url`` field."""
        return self.parent._to_record(self.parent.get_by_url(url), DeviceOrVM)

    def _search_device_or_vm(self, kind: ModelKind, args: Sequence[str]) -> ReturnResponse:
        response = self._find_all(DeviceOrVM, kind, *args)
        if response.code == 0:
            for record in response.data:
                record.object_type = kind.value
        return response

    def search_devices(self, *args: str) -> ReturnResponse:
        """Search devices, following every page.

        Args:
            *args: ``key=value`` filters, e.g. ``has_primary_ip=true``.

        Returns:
            ReturnResponse: List of ``DeviceOrVM`` in ``data``.
        """
        return self._search_device_or_vm(ModelKind.DEVICE, args)

    def search_device_and_vm(self, *args: str) -> ReturnResponse:
        """Search devices, then virtual machines, with the same filters.

        Args:
            *args: ``key=value`` filters.

        Returns:
            ReturnResponse: Devices followed by VMs in ``data``.
        """
        devices = self.search_devices(*args)
        if devices.code != 0:
            return devices
        vms = self.parent.virtualization.search_vms(*args)
        if vms.code != 0:
            return vms
        records = devices.data + vms.data
        return self.parent._ok(msg=f"{len(records)} devices and vms found", data=records)

    def _search_monitored_id(self, monitoring_id: int, kind: ModelKind) -> ReturnResponse:
        response = self._find_one(MonitoredObject, kind, Parse.query_term("cf_monitoring_id", monitoring_id))
        if response.code == 0:
            response.data.object_type = kind.value
        return response

    def find_monitored_device(self, monitoring_id: int) -> ReturnResponse:
        """Find the device whose ``monitoring_id`` custom field equals ``monitoring_id``."""
        return self._search_monitored_id(monitoring_id, ModelKind.DEVICE)

    def find_monitored_vm(self, monitoring_id: int) -> ReturnResponse:
        """Find the VM whose ``monitoring_id`` custom field equals ``monitoring_id``."""
        return self._search_monitored_id(monitoring_id, ModelKind.VIRTUAL_MACHINE)

    def find_monitored_object(self, monitoring_id: int) -> ReturnResponse:
        """Find the device or VM carrying ``monitoring_id``.

        Devices are searched first; not-found there falls through to VMs.

        Args:
            monitoring_id: Monitoring system ID.

        Returns:
            ReturnResponse: ``MonitoredObject`` with ``object_type`` set;
            ``NOT_FOUND`` when neither kind matches; ``AMBIGUOUS_RESULT`` when
            either kind has several matches.
        """
        device_response = self.find_monitored_device(monitoring_id)
        if device_response.code != RespCode.NOT_FOUND:
            return device_response
        return self.find_monitored_vm(monitoring_id)

    def set_monitoring_id(
        self,
        kind: Union[str, ModelKind],
        object_id: int,
        monitoring_id: int,
    ) -> ReturnResponse:
        """Set the ``monitoring_id`` custom field and journal the outcome.

        The journal entry is best-effort: its failure is only logged.

        Args:
            kind: Model kind of the object.
            object_id: Object ID.
            monitoring_id: Value to store.

        Returns:
            ReturnResponse: Result of the custom field update.
        """
        response = self.parent.extras.update_custom_field_on_model(kind, object_id, "monitoring_id", monitoring_id)
        if response.code != 0:
            self.parent.logger.error(
                "failed to add monitoring_id %s to %s %s: %s", monitoring_id, kind, object_id, response.msg
            )
            level = JournalKind.WARNING
            comments = f"failed to add monitoring_id: {monitoring_id}"
        else:
            level = JournalKind.SUCCESS
            comments = f"added monitoring_id {monitoring_id} to {getattr(kind, 'value', kind)} {object_id}"

        journal_response = self.parent.extras.add_journal_entry(kind, object_id, comments, level=level)
        if journal_response.code != 0:
            self.parent.logger.warning("journal entry for %s %s failed: %s", kind, object_id, journal_response.msg)
        return response

    def _interface_kind(self, parent_kind: Union[str, ModelKind]) -> ReturnResponse:
        """Map a parent discriminator to its interface kind and filter key."""
        key = parent_kind.value if isinstance(parent_kind, ModelKind) else parent_kind
        interface_kind = INTERFACE_PARENTS.get(key)
        if interface_kind is None:
            return self.parent._fail(
                code=RespCode.INVALID_PARAMS,
                msg="parent kind must be one of 'device' or 'virtualmachine'",
                data={"parent_kind": str(parent_kind)},
            )
        parent_field = "device" if interface_kind is ModelKind.INTERFACE else "virtual_machine"
        return self.parent._ok(msg="interface kind resolved", data=(interface_kind, parent_field))

    def find_interface_by_name(
        self,
        parent_kind: Union[str, ModelKind],
        parent_id: int,
        name: str,
    ) -> ReturnResponse:
        """Find an interface by name on a device or VM.

        Args:
            parent_kind: ``device`` or ``virtualmachine``.
            parent_id: Parent object ID.
            name: Interface name.

        Returns:
            ReturnResponse: ``Interface`` in ``data``.
        """
        kind_response = self._interface_kind(parent_kind)
        if kind_response.code != 0:
            return kind_response
        interface_kind, parent_field = kind_response.data
        return self._find_one(
            Interface,
            interface_kind,
            f"{parent_field}_id={parent_id}",
            Parse.query_term("name", name),
        )

    def get_interfaces_for_object(self, parent_kind: Union[str, ModelKind], parent_id: int) -> ReturnResponse:
        """List every interface of a device or VM.

        Args:
            parent_kind: ``device`` or ``virtualmachine``.
            parent_id: Parent object ID.

        Returns:
            ReturnResponse: List of ``Interface`` in ``data``.
        """
        kind_response = self._interface_kind(parent_kind)
        if kind_response.code != 0:
            return kind_response
        interface_kind, parent_field = kind_response.data
        return self._find_all(Interface, interface_kind, f"{parent_field}_id={parent_id}")

    def add_interface(
        self,
        parent_kind: Union[str, ModelKind],
        parent_id: int,
        interface: InterfaceEdit,
    ) -> ReturnResponse:
        """Create an interface on a device or VM.

        Args:
            parent_kind: ``device`` or ``virtualmachine``.
            parent_id: Parent object ID.
            interface: Interface body; the parent reference is set here.

        Returns:
            ReturnResponse: Created ``Interface`` in ``data``.
        """
        kind_response = self._interface_kind(parent_kind)
        if kind_response.code != 0:
            return kind_response
        interface_kind, parent_field = kind_response.data

        body = interface.model_copy(update={parent_field: parent_id})
        response = self._add_record(Interface, interface_kind, body.to_payload())
        if response.code != 0:
            self.parent.logger.error(
                "error adding interface %s to %s %s: %s", interface.name, parent_kind, parent_id, response.msg
            )
            return response
        self.parent.logger.info("added interface %s to %s %s", interface.name, parent_kind, parent_id)
        return response

    def update_interface(
        self,
        parent_kind: Union[str, ModelKind],
        interface_id: int,
        interface: InterfaceEdit,
    ) -> ReturnResponse:
        """PATCH the set fields of ``interface`` onto an existing interface.

        Args:
            parent_kind: ``device`` or ``virtualmachine``.
            interface_id: Interface ID.
            interface: Fields to change.

        Returns:
            ReturnResponse: Updated ``Interface`` in ``data``.
        """
        kind_response = self._interface_kind(parent_kind)
        if kind_response.code != 0:
            return kind_response
        interface_kind, _ = kind_response.data

        response = self.parent.update_object(interface_kind, interface_id, interface.to_payload())
        if response.code != 0:
            self.parent.logger.error("error updating interface %s: %s", interface_id, response.msg)
            return response
        return self.parent._to_record(response, Interface)


class TenancyEndpoint(Endpoint):

    """Tenants."""

    def get_tenant(self, tenant_id: int) -> ReturnResponse:
        """Get a tenant by ID.

        Args:
            tenant_id: Tenant ID.

        Returns:
            ReturnResponse: ``Tenant`` in ``data``.
        """
        return self._get_record(Tenant, ModelKind.TENANT, tenant_id)

    def find_tenant(self, name: str) -> ReturnResponse:
        return self._find_one(Tenant, ModelKind.TENANT, Parse.query_term("name", name))

    def search_tenants(self, *args: str) -> ReturnResponse:
        return self._find_all(Tenant, ModelKind.TENANT, *args)

    def add_tenant(
        self,
        name: str,
        slug: Optional[str] = None,
        group: Optional[int] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[TagLike]] = None,
    ) -> ReturnResponse:
        """Create a tenant.

        Args:
            name: Tenant name.
            slug: Tenant slug; derived from ``name`` when omitted.
            group: Tenant group ID.
            description: Description text.
            tags: Tags to attach.

        Returns:
            ReturnResponse: Created ``Tenant`` in ``data``.
        """
        payload = Parse.remove_dict_none_value(
            {
                "name": name,
                "slug": slug or Parse.slugify(name),
                "group": group,
                "description": description,
                "tags": self._tag_refs(tags),
            }
        )
        response = self._add_record(Tenant, ModelKind.TENANT, payload)
        if response.code == 0:
            self.parent.logger.info("added tenant %s %s", response.data.id, name)
        return response

    def _find_tenant_by_id(self, name: str) -> ReturnResponse:
        found = self.find_tenant(name)
        if found.code != 0:
            return found
        return self.get_tenant(found.data.id)

    def get_or_add_tenant(
        self,
        name: str,
        group: Optional[int] = None,
        tags: Optional[Sequence[TagLike]] = None,
    ) -> ReturnResponse:
        """Return the tenant named ``name``, creating it when absent.

        A found tenant is re-read by ID.

        Args:
            name: Tenant name.
            group: Tenant group ID used on creation.
            tags: Tags used on creation.

        Returns:
            ReturnResponse: ``Tenant`` in ``data``.
        """
        return self.parent._get_or_add(
            ModelKind.TENANT,
            name,
            search=lambda: self._find_tenant_by_id(name),
            add=lambda: self.add_tenant(name=name, group=group, tags=tags),
        )


class IpamEndpoint(Endpoint):

    """IP addresses."""

    def get_ip(self, ip_id: int) -> ReturnResponse:
        return self._get_record(IPAddress, ModelKind.IP_ADDRESS, ip_id)

    def search_ip(self, address: str) -> ReturnResponse:
        """Search IP address records matching ``address``.

        Args:
            address: IP address, with or without mask.

        Returns:
            ReturnResponse: List of ``IPAddress`` in ``data``.
        """
        response = self._find_all(IPAddress, ModelKind.IP_ADDRESS, Parse.query_term("address", address))
        if response.code != 0:
            self.parent.logger.error("could not find address %s: %s", address, response.msg)
        return response

    def add_ip(
        self,
        address: str,
        dns_name: Optional[str] = None,
        status: Optional[Literal["active", "reserved", "deprecated", "dhcp", "slaac"]] = None,
        tenant: Optional[int] = None,
        description: Optional[str] = None,
    ) -> ReturnResponse:
        """Create an IP address.

        Args:
            address: Address in CIDR notation.
            dns_name: DNS name.
            status: Address status.
            tenant: Tenant ID.
            description: Description text.

        Returns:
            ReturnResponse: Created ``IPAddress`` in ``data``.
        """
        payload = Parse.remove_dict_none_value(
            {
                "address": address,
                "dns_name": dns_name,
                "status": status,
                "tenant": tenant,
                "description": description,
            }
        )
        return self._add_record(IPAddress, ModelKind.IP_ADDRESS, payload)

    def update_address_dns(self, url: str, dns_name: str) -> ReturnResponse:
        """PATCH ``dns_name`` onto the IP address at ``url``.

        Args:
            url: The record's ``url`` field.
            dns_name: FQDN to set.

        Returns:
            ReturnResponse: Updated ``IPAddress`` in ``data``.
        """
        response = self.parent.update_object_by_url(url, {"dns_name": dns_name})
        if response.code != 0:
            self.parent.logger.error("could not update DNS url=%s: %s", url, response.msg)
            return response
        return self.parent._to_record(response, IPAddress)

    def set_ip_dns(self, address: str, dns_name: str) -> ReturnResponse:
        """Set ``dns_name`` on every record of ``address`` that has none.

        Records that already carry a DNS name are left untouched. A failed
        update does not stop the others.

        Args:
            address: IP address to search.
            dns_name: FQDN to set.

        Returns:
            ReturnResponse: Summary ``{total, updated, skipped, failed,
            results}``; ``PARTIAL_FAILURE`` when any update failed.
        """
        search_response = self.search_ip(address)
        if search_response.code != 0:
            return search_response

        results: List[Dict[str, Any]] = []
        for record in search_response.data:
            if record.dns_name:
                results.append({"id": record.id, "code": 0, "msg": "dns_name already set", "skipped": True})
                continue
            target = record.url or f"{ModelKind.IP_ADDRESS.path}/{record.id}/"
            response = self.update_address_dns(target, dns_name)
            results.append({"id": record.id, "code": response.code, "msg": response.msg, "skipped": False})

        failed = sum(1 for item in results if item["code"] != 0)
        skipped = sum(1 for item in results if item["skipped"])
        summary = {
            "total": len(results),
            "updated": len(results) - failed - skipped,
            "skipped": skipped,
            "failed": failed,
            "results": results,
        }
        if failed:
            return self.parent._fail(
                code=RespCode.PARTIAL_FAILURE,
                msg=f"ip-address [{address}] dns update completed with failures",
                data=summary,
            )
        return self.parent._ok(msg=f"ip-address [{address}] dns update completed", data=summary)

    def assign_ip_to_interface(
        self,
        ip_id: int,
        parent_kind: Union[str, ModelKind],
        interface_id: int,
    ) -> ReturnResponse:
        """Assign an IP address to a device or VM interface.

        Args:
            ip_id: IP address ID.
            parent_kind: ``device`` or ``virtualmachine``.
            interface_id: Interface ID.

        Returns:
            ReturnResponse: Updated ``IPAddress`` in ``data``.
        """
        kind_response = self.parent.dcim._interface_kind(parent_kind)
        if kind_response.code != 0:
            return kind_response
        interface_kind, _ = kind_response.data

        payload = {
            "assigned_object_type": interface_kind.object_type,
            "assigned_object_id": interface_id,
        }
        response = self.parent.update_object(ModelKind.IP_ADDRESS, ip_id, payload)
        return self.parent._to_record(response, IPAddress)


class VirtualizationEndpoint(Endpoint):

    """Virtual machines, clusters, cluster groups and cluster types."""

    def search_vms(self, *args: str) -> ReturnResponse:
        """Search virtual machines, following every page.

        Args:
            *args: ``key=value`` filters.

        Returns:
            ReturnResponse: List of ``DeviceOrVM`` in ``data``.
        """
        return self.parent.dcim._search_device_or_vm(ModelKind.VIRTUAL_MACHINE, args)

    def get_cluster_group(self, name: str) -> ReturnResponse:
        """Find a cluster group by name."""
        response = self._find_one(ClusterGroup, ModelKind.CLUSTER_GROUP, Parse.query_term("name", name))
        if response.code not in (0, RespCode.NOT_FOUND):
            self.parent.logger.error("error finding cluster group %s: %s", name, response.msg)
        return response

    def add_cluster_group(
        self,
        name: str,
        slug: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ReturnResponse:
        payload = Parse.remove_dict_none_value(
            {"name": name, "slug": slug or Parse.slugify(name), "description": description}
        )
        return self._add_record(ClusterGroup, ModelKind.CLUSTER_GROUP, payload)

    def get_or_add_cluster_group(self, name: str) -> ReturnResponse:
        """Return the cluster group named ``name``, creating it when absent."""
        return self.parent._get_or_add(
            ModelKind.CLUSTER_GROUP,
            name,
            search=lambda: self.get_cluster_group(name),
            add=lambda: self.add_cluster_group(name),
        )

    def get_cluster_type(self, name: str) -> ReturnResponse:
        """Find a cluster type by the slug of ``name``."""
        return self._find_one(ClusterType, ModelKind.CLUSTER_TYPE, Parse.query_term("slug", Parse.slugify(name)))

    def add_cluster_type(self, name: str, slug: Optional[str] = None) -> ReturnResponse:
        payload = {"name": name, "slug": slug or Parse.slugify(name)}
        return self._add_record(ClusterType, ModelKind.CLUSTER_TYPE, payload)

    def get_or_add_cluster_type(self, name: str) -> ReturnResponse:
        """Return the cluster type whose slug is ``slugify(name)``, creating it when absent."""
        slug = Parse.slugify(name)
        return self.parent._get_or_add(
            ModelKind.CLUSTER_TYPE,
            slug,
            search=lambda: self.get_cluster_type(name),
            add=lambda: self.add_cluster_type(name, slug=slug),
        )

    def get_cluster(self, name: str, group_id: Optional[int] = None) -> ReturnResponse:
        """Find a cluster by name, scoped to a cluster group when given.

        Args:
            name: Cluster name.
            group_id: Cluster group ID.

        Returns:
            ReturnResponse: ``Cluster`` in ``data``.
        """
        args = [Parse.query_term("name", name)]
        if group_id is not None:
            args.append(f"group_id={group_id}")
        response = self._find_one(Cluster, ModelKind.CLUSTER, *args)
        if response.code not in (0, RespCode.NOT_FOUND):
            self.parent.logger.error("error finding cluster %s: %s", name, response.msg)
        return response

    def _resolve_group_id(self, group: Union[int, str, None]) -> ReturnResponse:
        if group is None or isinstance(group, int):
            return self.parent._ok(msg="group id given", data=group)
        response = self.get_or_add_cluster_group(group)
        if response.code != 0:
            return response
        return self.parent._ok(msg=response.msg, data=response.data.id)

    def add_cluster(
        self,
        name: str,
        cluster_type: str,
        group: Union[int, str, None] = None,
        site: Optional[int] = None,
        tenant: Optional[int] = None,
        status: Literal["planned", "staging", "active", "decommissioning", "offline"] = "active",
    ) -> ReturnResponse:
        """Create a cluster, resolving its type and group first.

        Args:
            name: Cluster name.
            cluster_type: Cluster type name, reconciled by slug.
            group: Cluster group ID, or name reconciled with get-or-add.
            site: Site ID.
            tenant: Tenant ID.
            status: Cluster status.

        Returns:
            ReturnResponse: Created ``Cluster`` in ``data``.
        """
        type_response = self.get_or_add_cluster_type(cluster_type)
        if type_response.code != 0:
            return type_response

        group_response = self._resolve_group_id(group)
        if group_response.code != 0:
            return group_response

        payload = Parse.remove_dict_none_value(
            {
                "name": name,
                "type": type_response.data.id,
                "group": group_response.data,
                "site": site,
                "tenant": tenant,
                "status": status,
            }
        )
        return self._add_record(Cluster, ModelKind.CLUSTER, payload)

    def get_or_add_cluster(
        self,
        name: str,
        cluster_type: str,
        group: Optional[str] = None,
        site: Optional[int] = None,
        tenant: Optional[int] = None,
    ) -> ReturnResponse:
        """Return the cluster ``name`` within ``group``, creating it when absent.

        The group is reconciled first so the search is scoped to its ID.

        Args:
            name: Cluster name.
            cluster_type: Cluster type name used on creation.
            group: Cluster group name.
            site: Site ID used on creation.
            tenant: Tenant ID used on creation.

        Returns:
            ReturnResponse: ``Cluster`` in ``data``.
        """
        group_response = self._resolve_group_id(group)
        if group_response.code != 0:
            return group_response
        group_id = group_response.data

        return self.parent._get_or_add(
            ModelKind.CLUSTER,
            f"{group_id}:{name}",
            search=lambda: self.get_cluster(name, group_id=group_id),
            add=lambda: self.add_cluster(
                name=name,
                cluster_type=cluster_type,
                group=group_id,
                site=site,
                tenant=tenant,
            ),
        )


class ExtrasEndpoint(Endpoint):

    """Tags, journal entries and custom fields."""

    def get_tag(self, slug: str) -> ReturnResponse:
        return self._find_one(Tag, ModelKind.TAG, Parse.query_term("slug", slug))

    def add_tag(self, name: str, slug: Optional[str] = None, color: Optional[str] = None) -> ReturnResponse:
        """Create a tag.

        Args:
            name: Tag name.
            slug: Tag slug; derived from ``name`` when omitted.
            color: Hex color without ``#``.

        Returns:
            ReturnResponse: Created ``Tag`` in ``data``.
        """
        payload = Parse.remove_dict_none_value({"name": name, "slug": slug or Parse.slugify(name), "color": color})
        response = self._add_record(Tag, ModelKind.TAG, payload)
        if response.code == 0:
            self.parent.logger.info("added tag: %s", name)
        return response

    def get_or_add_tag(self, name: str, slug: Optional[str] = None, color: Optional[str] = None) -> ReturnResponse:
        """Return the tag with ``slug`` (default: slug of ``name``), creating it when absent."""
        resolved_slug = slug or Parse.slugify(name)
        return self.parent._get_or_add(
            ModelKind.TAG,
            resolved_slug,
            search=lambda: self.get_tag(resolved_slug),
            add=lambda: self.add_tag(name, slug=resolved_slug, color=color),
        )

    def add_journal_entry(
        self,
        kind: Union[str, ModelKind],
        object_id: int,
        comments: str,
        level: Optional[JournalKind] = None,
    ) -> ReturnResponse:
        """Append a journal entry to an object.

        Args:
            kind: Model kind of the object.
            object_id: Object ID.
            comments: Journal text.
            level: Entry kind; the server default is used when omitted.

        Returns:
            ReturnResponse: Created ``JournalEntry`` in ``data``.
        """
        object_type = get_object_type(kind)
        if object_type == INVALID_OBJECT_TYPE:
            return self.parent._fail(
                code=RespCode.CONFIGURATION_ERROR,
                msg=f"model [{kind}] has no object type",
                data={"kind": str(kind)},
            )

        payload: Dict[str, Any] = {
            "assigned_object_type": object_type,
            "assigned_object_id": object_id,
            "comments": comments,
        }
        if level is not None:
            payload["kind"] = JournalKind(level).value
        return self._add_record(JournalEntry, ModelKind.JOURNAL_ENTRY, payload)

    def update_custom_field_on_model(
        self,
        kind: Union[str, ModelKind],
        object_id: int,
        field: str,
        value: Any,
    ) -> ReturnResponse:
        """Set one custom field on an object.

        The body is ``{"custom_fields": {field: value}}`` and nothing else, so
        other fields and custom fields are left alone.

        Args:
            kind: Model kind of the object.
            object_id: Object ID.
            field: Custom field name.
            value: New value.

        Returns:
            ReturnResponse: Updated object dict in ``data``.
        """
        return self.parent.update_object(kind, object_id, {"custom_fields": {field: value}})

    def get_custom_field(self, name: str) -> ReturnResponse:
        return self._find_one(CustomField, ModelKind.CUSTOM_FIELD, Parse.query_term("name", name))

    def custom_field_exists(self, name: str) -> ReturnResponse:
        """Check whether a custom field exists.

        Args:
            name: Custom field name.

        Returns:
            ReturnResponse: ``bool`` in ``data``; ``AMBIGUOUS_RESULT`` (with
            ``data=True``) when several fields match.
        """
        response = self.get_custom_field(name)
        if response.code == 0:
            return self.parent._ok(msg=f"custom-field [{name}] exists", data=True)
        if response.code == RespCode.NOT_FOUND:
            return self.parent._ok(msg=f"custom-field [{name}] not found", data=False)
        if response.code == RespCode.AMBIGUOUS_RESULT:
            return self.parent._fail(code=response.code, msg=response.msg, data=True)
        return response

    def add_custom_field(
        self,
        name: str,
        label: str,
        *object_kinds: Union[str, ModelKind],
        readonly: bool = False,
        field_type: str = "text",
    ) -> ReturnResponse:
        """Create a custom field attached to one or more object kinds.

        Args:
            name: Internal field name.
            label: Display name.
            *object_kinds: Kinds to attach the field to; at least one.
            readonly: Hide the field from UI editing.
            field_type: Custom field type.

        Returns:
            ReturnResponse: Created ``CustomField`` in ``data``.
        """
        if not object_kinds:
            return self.parent._fail(
                code=RespCode.INVALID_PARAMS,
                msg="at least 1 object type must be specified",
            )

        object_types = [get_object_type(kind) for kind in object_kinds]
        invalid = [str(kind) for kind, object_type in zip(object_kinds, object_types) if object_type == INVALID_OBJECT_TYPE]
        if invalid:
            return self.parent._fail(
                code=RespCode.CONFIGURATION_ERROR,
                msg=f"invalid object kinds for custom-field [{name}]",
                data={"invalid": invalid},
            )

        payload: Dict[str, Any] = {
            "name": name,
            "label": label,
            "type": field_type,
            "object_types": object_types,
        }
        if readonly:
            payload["ui_editable"] = "no"

        response = self._add_record(CustomField, ModelKind.CUSTOM_FIELD, payload)
        if response.code != 0:
            self.parent.logger.error("could not add custom field %s: %s", name, response.msg)
        return response

    def get_or_add_custom_field(
        self,
        name: str,
        label: str,
        *object_kinds: Union[str, ModelKind],
        readonly: bool = False,
        field_type: str = "text",
    ) -> ReturnResponse:
        """Return the custom field ``name``, creating it when absent."""
        return self.parent._get_or_add(
            ModelKind.CUSTOM_FIELD,
            name,
            search=lambda: self.get_custom_field(name),
            add=lambda: self.add_custom_field(name, label, *object_kinds, readonly=readonly, field_type=field_type),
        )
