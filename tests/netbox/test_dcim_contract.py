#!/usr/bin/env python3

"""DCIM contract tests for NetBox client."""

from __future__ import annotations

import logging

import pytest

from netbox_fakes import RecordingTransport, ok, page, remote_error
from netboxkit.netbox.client import NetboxClient
from netboxkit.schemas.codes import RespCode
from netboxkit.schemas.netbox import DeviceOrVM, Interface, InterfaceEdit, Location, MonitoredObject


def test_find_monitored_object_prefers_devices(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([{"id": 4, "url": "https://netbox.example.com/api/dcim/devices/4/"}]))

    response = client.dcim.find_monitored_object(1001)

    assert response.code == 0
    assert isinstance(response.data, MonitoredObject)
    assert response.data.object_type == "device"
    assert transport.urls == ["/dcim/devices/?cf_monitoring_id=1001"]


def test_find_monitored_object_falls_through_to_vms(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([]), page([{"id": 9}]))

    response = client.dcim.find_monitored_object(1001)

    assert response.code == 0
    assert response.data.id == 9
    assert response.data.object_type == "virtualmachine"
    assert transport.urls == [
        "/dcim/devices/?cf_monitoring_id=1001",
        "/virtualization/virtual-machines/?cf_monitoring_id=1001",
    ]


def test_find_monitored_object_not_found(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([]), page([]))

    response = client.dcim.find_monitored_object(1001)

    assert response.code == RespCode.NOT_FOUND


def test_find_monitored_object_ambiguous_device_stops(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([{"id": 1}, {"id": 2}]))

    response = client.dcim.find_monitored_object(1001)

    assert response.code == RespCode.AMBIGUOUS_RESULT
    assert len(transport.calls) == 1


def test_find_monitored_object_device_error_stops(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(remote_error())

    response = client.dcim.find_monitored_object(1001)

    assert response.code == RespCode.REMOTE_ERROR
    assert len(transport.calls) == 1


def test_set_monitoring_id_journals_success(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(ok({"id": 4, "custom_fields": {"monitoring_id": 77}}), ok({"id": 1}))

    response = client.dcim.set_monitoring_id("device", 4, 77)

    assert response.code == 0
    journal = transport.calls[1]
    assert journal["api_url"] == "/extras/journal-entries/"
    assert journal["json_data"]["kind"] == "success"
    assert journal["json_data"]["assigned_object_type"] == "dcim.device"
    assert journal["json_data"]["assigned_object_id"] == 4


def test_set_monitoring_id_journals_warning_on_failure(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(remote_error(status=400), ok({"id": 1}))

    response = client.dcim.set_monitoring_id("virtualmachine", 9, 77)

    assert response.code == RespCode.REMOTE_ERROR
    assert transport.calls[1]["json_data"]["kind"] == "warning"
    assert transport.calls[1]["json_data"]["comments"] == "failed to add monitoring_id: 77"


def test_set_monitoring_id_ignores_journal_failure(
    client: NetboxClient,
    transport: RecordingTransport,
    caplog: pytest.LogCaptureFixture,
) -> None:
    transport.queue(ok({"id": 4}), remote_error())

    with caplog.at_level(logging.WARNING, logger="netboxkit.netbox.client"):
        response = client.dcim.set_monitoring_id("device", 4, 77)

    assert response.code == 0
    assert any("journal entry" in record.getMessage() for record in caplog.records)


def test_get_device_or_vm_sets_object_type(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(ok({"id": 9, "name": "vm1", "custom_fields": {"monitoring_id": 5}}))

    response = client.dcim.get_device_or_vm("virtualmachine", 9)

    assert response.code == 0
    assert isinstance(response.data, DeviceOrVM)
    assert response.data.object_type == "virtualmachine"
    assert response.data.monitoring_id == 5
    assert transport.urls == ["/virtualization/virtual-machines/9/"]


def test_get_device_or_vm_rejects_other_kinds(client: NetboxClient, transport: RecordingTransport) -> None:
    response = client.dcim.get_device_or_vm("site", 1)

    assert response.code == RespCode.CONFIGURATION_ERROR
    assert transport.calls == []


@pytest.mark.parametrize("parent_kind", ["cluster", "vm", "Device"])
def test_interface_operations_reject_unknown_parent(
    client: NetboxClient,
    transport: RecordingTransport,
    parent_kind: str,
) -> None:
    """An unknown parent discriminator fails before any request."""
    responses = [
        client.dcim.find_interface_by_name(parent_kind, 1, "eth0"),
        client.dcim.get_interfaces_for_object(parent_kind, 1),
        client.dcim.add_interface(parent_kind, 1, InterfaceEdit(name="eth0")),
        client.dcim.update_interface(parent_kind, 1, InterfaceEdit(name="eth0")),
    ]

    assert [response.code for response in responses] == [RespCode.INVALID_PARAMS] * 4
    assert transport.calls == []


def test_find_interface_by_name_uses_parent_filter(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([{"id": 12, "name": "eth0", "duplex": None}]))

    response = client.dcim.find_interface_by_name("virtualmachine", 9, "eth0")

    assert response.code == 0
    assert isinstance(response.data, Interface)
    assert response.data.get_duplex() == "auto"
    assert transport.urls == ["/virtualization/interfaces/?virtual_machine_id=9&name=eth0"]


def test_find_interface_by_name_ambiguous(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([{"id": 1, "name": "eth0"}, {"id": 2, "name": "eth0"}]))

    response = client.dcim.find_interface_by_name("device", 4, "eth0")

    assert response.code == RespCode.AMBIGUOUS_RESULT


def test_get_interfaces_for_device(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([{"id": 1, "name": "Gi0/1"}, {"id": 2, "name": "Gi0/2"}]))

    response = client.dcim.get_interfaces_for_object("device", 4)

    assert response.code == 0
    assert [interface.name for interface in response.data] == ["Gi0/1", "Gi0/2"]
    assert transport.urls == ["/dcim/interfaces/?device_id=4"]


def test_add_interface_sets_parent_reference(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(ok({"id": 20, "name": "eth1"}))
    edit = InterfaceEdit(name="eth1")
    edit.set_speed(1000000)
    edit.set_duplex("full-duplex")

    response = client.dcim.add_interface("virtualmachine", 9, edit)

    assert response.code == 0
    assert transport.urls == ["/virtualization/interfaces/"]
    assert transport.calls[0]["json_data"] == {
        "name": "eth1",
        "virtual_machine": 9,
        "speed": 1000000,
        "duplex": "full",
    }
    assert edit.virtual_machine is None


def test_update_interface_patches_set_fields(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(ok({"id": 20, "name": "eth1", "parent": {"id": 19}}))
    edit = InterfaceEdit()
    edit.set_parent(19)

    response = client.dcim.update_interface("device", 20, edit)

    assert response.code == 0
    assert transport.calls[0]["method"] == "PATCH"
    assert transport.calls[0]["api_url"] == "/dcim/interfaces/20/"
    assert transport.calls[0]["json_data"] == {"parent": 19}


def test_add_location_writes_info_journal(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(ok({"id": 6, "name": "Floor 1", "slug": "floor-1"}), ok({"id": 1}))

    response = client.dcim.add_location(3, "Floor 1", comments="added by sync")

    assert response.code == 0
    assert isinstance(response.data, Location)
    assert transport.calls[0]["json_data"] == {"name": "Floor 1", "slug": "floor-1", "site": 3, "status": "active"}
    assert transport.calls[1]["json_data"] == {
        "assigned_object_type": "dcim.location",
        "assigned_object_id": 6,
        "comments": "added by sync",
        "kind": "info",
    }


def test_add_location_without_comments_skips_journal(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(ok({"id": 6, "name": "Floor 1"}))

    response = client.dcim.add_location(3, "Floor 1")

    assert response.code == 0
    assert len(transport.calls) == 1


def test_get_interfaces_for_unnamed_device(client: NetboxClient, transport: RecordingTransport) -> None:
    """A ``null`` name on the nested device does not reject the listing."""
    transport.queue(
        page([{"id": 1, "name": "eth0", "device": {"id": 5, "url": "u", "display": "Unnamed", "name": None}}])
    )

    response = client.dcim.get_interfaces_for_object("device", 5)

    assert response.code == 0
    assert response.data[0].name == "eth0"
    assert response.data[0].device.id == 5
    assert response.data[0].device.name == ""
