#!/usr/bin/env python3

"""Get-or-add contract tests for NetBox client."""

from __future__ import annotations

import threading
import time
from typing import Any, Dict, List, Optional

import pytest

from netbox_fakes import RecordingTransport, ok, page, remote_error
from netboxkit.netbox.client import NetboxClient
from netboxkit.schemas.codes import RespCode
from netboxkit.schemas.netbox import Cluster, Site, Tenant
from netboxkit.schemas.response import ReturnResponse


def test_get_or_add_tenant_creates_when_absent(client: NetboxClient, transport: RecordingTransport) -> None:
    """Zero matches lead to exactly one POST with a slugified name."""
    transport.queue(
        page([]),
        ok({"id": 5, "name": "Acme Corp", "slug": "acme-corp"}),
    )

    response = client.tenancy.get_or_add_tenant("Acme Corp")

    assert response.code == 0
    assert isinstance(response.data, Tenant)
    assert response.data.id == 5
    assert transport.methods == ["GET", "POST"]
    assert transport.urls == ["/tenancy/tenants/?name=Acme%20Corp", "/tenancy/tenants/"]
    assert transport.calls[1]["json_data"] == {"name": "Acme Corp", "slug": "acme-corp"}


def test_get_or_add_tenant_reads_found_tenant_by_id(client: NetboxClient, transport: RecordingTransport) -> None:
    """A single match is re-read with GET, never POST."""
    transport.queue(
        page([{"id": 5, "name": "Acme"}]),
        ok({"id": 5, "name": "Acme", "slug": "acme", "description": "full record"}),
    )

    response = client.tenancy.get_or_add_tenant("Acme")

    assert response.code == 0
    assert response.data.description == "full record"
    assert transport.methods == ["GET", "GET"]
    assert transport.urls[1] == "/tenancy/tenants/5/"


def test_get_or_add_tenant_ambiguous_never_creates(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([{"id": 1, "name": "Acme"}, {"id": 2, "name": "Acme"}]))

    response = client.tenancy.get_or_add_tenant("Acme")

    assert response.code == RespCode.AMBIGUOUS_RESULT
    assert response.data["count"] == 2
    assert transport.methods == ["GET"]


def test_get_or_add_aborts_on_remote_error(client: NetboxClient, transport: RecordingTransport) -> None:
    """Only not-found leads to creation; a failed search is returned as-is."""
    transport.queue(remote_error(status=503))

    response = client.extras.get_or_add_tag("prod")

    assert response.code == RespCode.REMOTE_ERROR
    assert transport.methods == ["GET"]


def test_find_site_falls_back_to_slug(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(
        page([]),
        page([{"id": 3, "name": "HQ Site", "slug": "hq-site"}]),
    )

    response = client.dcim.get_or_add_site("hq site")

    assert response.code == 0
    assert isinstance(response.data, Site)
    assert response.data.id == 3
    assert transport.urls == ["/dcim/sites/?name=hq%20site", "/dcim/sites/?slug=hq-site"]


def test_get_site_id_returns_id(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([{"id": 11, "name": "DC1"}]))

    response = client.dcim.get_site_id("DC1")

    assert response.code == 0
    assert response.data == 11


def test_get_or_add_site_uses_address_cache(client: NetboxClient, transport: RecordingTransport) -> None:
    """A known physical address skips the search and reads the site by ID."""
    transport.queue(
        page([]),
        page([]),
        ok({"id": 3, "name": "HQ", "slug": "hq", "physical_address": "1 Main St"}),
        ok({"id": 3, "name": "HQ", "slug": "hq", "physical_address": "1 Main St"}),
    )

    first = client.dcim.get_or_add_site("HQ", physical_address="1 Main St")
    second = client.dcim.get_or_add_site("Other name", physical_address="1 Main St")

    assert first.code == 0
    assert second.code == 0
    assert second.data.id == 3
    assert transport.methods == ["GET", "GET", "POST", "GET"]
    assert transport.urls[-1] == "/dcim/sites/3/"
    assert transport.calls[2]["json_data"] == {
        "name": "HQ",
        "slug": "hq",
        "status": "active",
        "physical_address": "1 Main St",
    }


def test_clear_site_cache_forces_search(client: NetboxClient, transport: RecordingTransport) -> None:
    client._cache_site_id("1 Main St", 3)
    client.clear_site_cache()
    transport.queue(page([{"id": 3, "name": "HQ"}]))

    response = client.dcim.get_or_add_site("HQ", physical_address="1 Main St")

    assert response.code == 0
    assert transport.urls == ["/dcim/sites/?name=HQ"]


def test_add_site_resolves_tenant_name(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(
        page([{"id": 5, "name": "Acme"}]),
        ok({"id": 5, "name": "Acme"}),
        ok({"id": 8, "name": "Branch"}),
    )

    response = client.dcim.add_site("Branch", tenant="Acme", tags=["prod"])

    assert response.code == 0
    assert transport.calls[-1]["json_data"] == {
        "name": "Branch",
        "slug": "branch",
        "status": "active",
        "tenant": 5,
        "tags": [{"slug": "prod"}],
    }


def test_add_or_update_site_patches_existing(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(
        page([{"id": 4, "name": "HQ"}]),
        ok({"id": 4, "name": "HQ", "description": "main office"}),
    )

    response = client.dcim.add_or_update_site("HQ", description="main office")

    assert response.code == 0
    assert response.data.description == "main office"
    assert transport.calls[-1]["method"] == "PATCH"
    assert transport.calls[-1]["api_url"] == "/dcim/sites/4/"
    assert transport.calls[-1]["json_data"] == {"description": "main office"}


def test_add_or_update_site_creates_missing(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([]), page([]), ok({"id": 9, "name": "New"}))

    response = client.dcim.add_or_update_site("New", status="planned")

    assert response.code == 0
    assert transport.methods == ["GET", "GET", "POST"]
    assert transport.calls[-1]["json_data"]["status"] == "planned"


def test_get_or_add_site_group_by_slug(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([]), ok({"id": 2, "name": "East Coast", "slug": "east-coast"}))

    response = client.dcim.get_or_add_site_group("East Coast")

    assert response.code == 0
    assert transport.urls == ["/dcim/site-groups/?slug=east-coast", "/dcim/site-groups/"]


def test_get_or_add_cluster_scopes_search_to_group(client: NetboxClient, transport: RecordingTransport) -> None:
    """The cluster search carries the reconciled group ID."""
    transport.queue(
        page([{"id": 4, "name": "g1"}]),
        page([]),
        page([{"id": 2, "name": "VMware ESXi", "slug": "vmware-esxi"}]),
        ok({"id": 10, "name": "c1"}),
    )

    response = client.virtualization.get_or_add_cluster("c1", "VMware ESXi", group="g1")

    assert response.code == 0
    assert isinstance(response.data, Cluster)
    assert transport.urls == [
        "/virtualization/cluster-groups/?name=g1",
        "/virtualization/clusters/?name=c1&group_id=4",
        "/virtualization/cluster-types/?slug=vmware-esxi",
        "/virtualization/clusters/",
    ]
    assert transport.calls[-1]["json_data"] == {"name": "c1", "type": 2, "group": 4, "status": "active"}


def test_get_or_add_cluster_group_creates(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(page([]), ok({"id": 7, "name": "Lab Group", "slug": "lab-group"}))

    response = client.virtualization.get_or_add_cluster_group("Lab Group")

    assert response.code == 0
    assert response.data.id == 7
    assert transport.calls[-1]["json_data"] == {"name": "Lab Group", "slug": "lab-group"}


def test_add_cluster_stops_when_type_fails(client: NetboxClient, transport: RecordingTransport) -> None:
    transport.queue(remote_error())

    response = client.virtualization.add_cluster("c1", "kvm")

    assert response.code == RespCode.REMOTE_ERROR
    assert transport.methods == ["GET"]


def test_concurrent_get_or_add_creates_once(client: NetboxClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Two threads reconciling the same tag on one client create it once."""
    tags: List[Dict[str, Any]] = []
    posts: List[int] = []
    state_lock = threading.Lock()

    def fake_request(
        method: str,
        api_url: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Any = None,
    ) -> ReturnResponse:
        if method == "GET":
            with state_lock:
                snapshot = list(tags)
            time.sleep(0.05)
            return page(snapshot)
        with state_lock:
            posts.append(1)
            record = {"id": len(tags) + 1, **json_data}
            tags.append(record)
        return ok(record)

    monkeypatch.setattr(client, "_request", fake_request)

    results: List[ReturnResponse] = []
    threads = [
        threading.Thread(target=lambda: results.append(client.extras.get_or_add_tag("prod")))
        for _ in range(2)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(posts) == 1
    assert [response.code for response in results] == [0, 0]
    assert {response.data.id for response in results} == {1}


def test_reconcile_locks_are_released(client: NetboxClient, transport: RecordingTransport) -> None:
    """Lock entries do not accumulate once reconciliation finishes."""
    transport.queue(
        page([]),
        ok({"id": 1, "name": "a", "slug": "a"}),
        remote_error(),
    )

    client.extras.get_or_add_tag("a")
    client.extras.get_or_add_tag("b")

    assert client._reconcile_locks == {}
