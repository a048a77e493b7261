#!/usr/bin/env python3

"""NetBox client with unified ReturnResponse contract."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Type, TypeVar, Union

import requests
from pydantic import BaseModel, ValidationError
from requests import Response
from requests.exceptions import RequestException

from ..schemas.codes import RespCode
from ..schemas.response import ReturnResponse
from ..utils.load_config import NetboxConfig
from ..utils.parse import Parse
from .endpoints import (
    DcimEndpoint,
    ExtrasEndpoint,
    IpamEndpoint,
    TenancyEndpoint,
    VirtualizationEndpoint,
)
from .kinds import ModelKind, resolve_kind

RecordT = TypeVar("RecordT", bound=BaseModel)
KindLike = Union[str, ModelKind]


class NetboxClient:
    """Client wrapper for NetBox REST APIs.

    Every external IO method returns a ``ReturnResponse``; callers check
    ``code`` before using ``data``. Per-app operations live on the endpoint
    groups ``dcim``, ``tenancy``, ``ipam``, ``virtualization`` and ``extras``.

    Reconciliation (get-or-add) is serialized per natural key within one
    client instance only. Two processes reconciling the same key at the same
    time can still both create it.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 10,
        verify_ssl: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize a NetBox client.

        Args:
            url: NetBox base URL, without the ``/api`` suffix.
            token: NetBox API token.
            timeout: HTTP timeout in seconds.
            verify_ssl: Whether TLS certificates are verified.
            logger: Optional logger instance.
        """
        self._url = (url or "").rstrip("/")
        self._token = token or ""
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.logger = logger or logging.getLogger(__name__)
        self._headers = {
            "Authorization": f"Token {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        # natural key -> [lock, holders and waiters]; dropped when unused
        self._reconcile_locks: Dict[str, List[Any]] = {}
        self._reconcile_locks_lock = threading.Lock()
        # physical address -> site id, never evicted
        self._site_address_cache: Dict[str, int] = {}
        self._site_address_cache_lock = threading.Lock()

        self.dcim = DcimEndpoint(self)
        self.tenancy = TenancyEndpoint(self)
        self.ipam = IpamEndpoint(self)
        self.virtualization = VirtualizationEndpoint(self)
        self.extras = ExtrasEndpoint(self)

    @classmethod
    def from_config(
        cls,
        config: Union[NetboxConfig, Mapping[str, Any]],
        logger: Optional[logging.Logger] = None,
    ) -> "NetboxClient":
        """Create a client from ``NetboxConfig`` or a loaded ``[netbox]`` section.

        Args:
            config: Config object or mapping.
            logger: Optional logger instance.

        Returns:
            NetboxClient: Initialized client.
        """
        if not isinstance(config, NetboxConfig):
            config = NetboxConfig.from_mapping(config)
        return cls(
            url=config.url,
            token=config.token,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            logger=logger,
        )

    @property
    def url(self) -> str:
        return self._url

    @property
    def token(self) -> str:
        return self._token

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    def _ok(self, msg: str, data: Any = None) -> ReturnResponse:
        """Build a success response.

        Args:
            msg: Message text.
            data: Optional payload.

        Returns:
            ReturnResponse: Standard success response.
        """
        return ReturnResponse.ok(msg=msg, data=data)

    def _fail(self, code: int, msg: str, data: Any = None) -> ReturnResponse:
        """Build a failure response.

        Args:
            code: ``RespCode`` value.
            msg: Error message text.
            data: Optional failure payload.

        Returns:
            ReturnResponse: Standard failure response.
        """
        return ReturnResponse.fail(code=code, msg=msg, data=data)

    def _join_url(self, api_url: str) -> str:
        """Resolve API URL to an absolute URL.

        Args:
            api_url: Path below ``/api`` or an absolute URL.

        Returns:
            str: Absolute URL.
        """
        if api_url.startswith("http://") or api_url.startswith("https://"):
            return api_url
        if not api_url.startswith("/"):
            api_url = f"/{api_url}"
        return f"{self._url}/api{api_url}"

    def _model_path(self, kind: Optional[KindLike]) -> ReturnResponse:
        """Resolve the API path of a model kind.

        Args:
            kind: Kind name or ``ModelKind``.

        Returns:
            ReturnResponse: Path in ``data``; ``CONFIGURATION_ERROR`` for
            unsupported kinds.
        """
        resolved = resolve_kind(kind)
        if resolved is None:
            self.logger.error("could not determine the path for model %s", kind)
            return self._fail(
                code=RespCode.CONFIGURATION_ERROR,
                msg=f"could not determine the path for model {kind}",
                data={"kind": str(kind)},
            )
        return self._ok(msg=f"path for {resolved.value} resolved", data=resolved.path)

    def _log_step(
        self,
        task_id: str,
        method: str,
        target: str,
        result: str,
        status: Optional[int],
        start_ts: float,
    ) -> None:
        """Emit one log line per external call.

        Failures are logged at ERROR, successes at DEBUG.

        Args:
            task_id: Correlation identifier.
            method: HTTP method.
            target: Request target.
            result: Execution result.
            status: HTTP status, ``None`` for transport failures.
            start_ts: Monotonic start timestamp.
        """
        duration_ms = int((time.monotonic() - start_ts) * 1000)
        level = logging.DEBUG if result == "ok" else logging.ERROR
        self.logger.log(
            level,
            "task_id=%s method=%s target=%s result=%s status=%s duration_ms=%s",
            task_id,
            method,
            target,
            result,
            status,
            duration_ms,
        )

    def _request(
        self,
        method: str,
        api_url: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Any = None,
    ) -> ReturnResponse:
        """Send one authenticated HTTP request.

        Args:
            method: HTTP method.
            api_url: Path below ``/api`` or an absolute URL.
            params: Optional query params.
            json_data: Optional JSON payload.

        Returns:
            ReturnResponse: Parsed JSON body on 2xx; ``REMOTE_ERROR`` with
            ``http_status`` and the raw body text in ``err`` otherwise;
            ``TRANSPORT_ERROR`` when the service cannot be reached.
        """
        if not self._url and not api_url.startswith("http"):
            return self._fail(
                code=RespCode.CONFIGURATION_ERROR,
                msg="netbox url is not configured",
            )

        full_url = self._join_url(api_url)
        method_upper = method.upper()
        task_id = uuid.uuid4().hex[:8]
        start_ts = time.monotonic()

        try:
            response = requests.request(
                method=method_upper,
                url=full_url,
                headers=self._headers,
                params=params,
                json=json_data,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except RequestException as exc:
            self._log_step(task_id, method_upper, api_url, "transport_error", None, start_ts)
            return self._fail(
                code=RespCode.TRANSPORT_ERROR,
                msg=f"{method_upper} {api_url} exception",
                data={"err": str(exc)},
            )

        if not 200 <= response.status_code < 300:
            self._log_step(task_id, method_upper, api_url, "fail", response.status_code, start_ts)
            return self._fail(
                code=RespCode.REMOTE_ERROR,
                msg=f"{method_upper} {api_url} failed",
                data={"http_status": response.status_code, "err": response.text},
            )

        parsed, payload = self._safe_json(response)
        if not parsed:
            self._log_step(task_id, method_upper, api_url, "bad_payload", response.status_code, start_ts)
            return self._fail(
                code=RespCode.BAD_PAYLOAD,
                msg=f"{method_upper} {api_url} returned a non-JSON body",
                data={"http_status": response.status_code, "err": payload},
            )

        self._log_step(task_id, method_upper, api_url, "ok", response.status_code, start_ts)
        return self._ok(msg=f"{method_upper} {api_url} success", data=payload)

    def _safe_json(self, response: Response) -> tuple[bool, Any]:
        """Parse response JSON safely.

        Args:
            response: HTTP response.

        Returns:
            tuple[bool, Any]: ``(True, payload)`` on success, ``(True, None)``
            for an empty body and ``(False, text)`` for a non-JSON body.
        """
        if response.status_code == 204:
            return True, None
        try:
            return True, response.json()
        except ValueError:
            text = response.text or ""
            if not text.strip():
                return True, None
            return False, text

    def _extract_results(self, payload: Any) -> List[Dict[str, Any]]:
        """Extract ``results`` list from a paginated payload.

        Args:
            payload: JSON payload.

        Returns:
            list[dict[str, Any]]: Results list.
        """
        if isinstance(payload, dict):
            results = payload.get("results")
            if isinstance(results, list):
                return [item for item in results if isinstance(item, dict)]
        return []

    def _extract_count(self, payload: Any, results: List[Dict[str, Any]]) -> int:
        """Extract the count from payload.

        Args:
            payload: JSON payload.
            results: Parsed results list.

        Returns:
            int: Result count.
        """
        if isinstance(payload, dict) and isinstance(payload.get("count"), int):
            return payload["count"]
        return len(results)

    def _paginate(self, api_url: str, params: Optional[Dict[str, Any]] = None) -> ReturnResponse:
        """GET every page of a list endpoint by following ``next``.

        ``params`` is only sent with the first request; ``next`` URLs
        already carry the query.

        Args:
            api_url: First page path or URL.
            params: Optional query params.

        Returns:
            ReturnResponse: All results in page order. On failure, ``data``
            holds the failure details plus the ``results`` gathered so far.
        """
        results: List[Dict[str, Any]] = []
        next_url: Optional[str] = api_url
        next_params = params

        while next_url:
            response = self._request("GET", next_url, params=next_params)
            if response.code != 0:
                failure = dict(response.data) if isinstance(response.data, dict) else {"err": response.data}
                failure["results"] = results
                return self._fail(code=response.code, msg=response.msg, data=failure)

            if not isinstance(response.data, dict) or not isinstance(response.data.get("results"), list):
                return self._fail(
                    code=RespCode.BAD_PAYLOAD,
                    msg=f"GET {next_url} list payload is invalid",
                    data={"err": response.data, "results": results},
                )

            results.extend(self._extract_results(response.data))

            raw_next = response.data.get("next")
            next_url = raw_next if isinstance(raw_next, str) and raw_next else None
            next_params = None

        return self._ok(msg=f"GET {api_url} fetched {len(results)} results", data=results)

    def _search_path(self, path: str, args: tuple[str, ...]) -> str:
        query = Parse.build_query(args)
        return f"{path}/?{query}" if query else f"{path}/"

    def _search_one(self, kind: KindLike, *args: str) -> ReturnResponse:
        """Look up exactly one object by filters.

        Args:
            kind: Model kind.
            *args: ``key=value`` filters.

        Returns:
            ReturnResponse: The matching object dict in ``data``;
            ``NOT_FOUND`` for zero results; ``AMBIGUOUS_RESULT`` for more
            than one.
        """
        response = self.search(kind, *args)
        if response.code != 0:
            return response

        results = self._extract_results(response.data)
        count = self._extract_count(response.data, results)
        resource = str(getattr(kind, "value", kind))
        if count > 1:
            return self._fail(
                code=RespCode.AMBIGUOUS_RESULT,
                msg=f"{resource} has multiple results",
                data={"filters": list(args), "count": count},
            )
        if count == 0 or not results:
            return ReturnResponse.no_data(
                msg=f"{resource} not found",
                data={"filters": list(args)},
            )
        return self._ok(msg=f"{resource} found", data=results[0])

    @contextmanager
    def _reconcile_lock(self, key: str) -> Iterator[None]:
        """Serialize reconciliation of one natural key within this client.

        The key's lock is removed once no caller holds or waits on it.
        """
        with self._reconcile_locks_lock:
            entry = self._reconcile_locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._reconcile_locks_lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._reconcile_locks[key]

    def _get_or_add(
        self,
        kind: KindLike,
        natural_key: str,
        search: Callable[[], ReturnResponse],
        add: Callable[[], ReturnResponse],
    ) -> ReturnResponse:
        """Return the object found by ``search`` or create it with ``add``.

        Only ``NOT_FOUND`` leads to creation; every other failure, including
        ``AMBIGUOUS_RESULT``, is returned as-is.

        Args:
            kind: Model kind, used for the lock key and messages.
            natural_key: Human key being reconciled.
            search: Exactly-one lookup.
            add: Create call.

        Returns:
            ReturnResponse: Found or created record.
        """
        resource = str(getattr(kind, "value", kind))
        with self._reconcile_lock(f"{resource}:{natural_key}"):
            found = search()
            if found.code == 0:
                return self._ok(msg=f"{resource} [{natural_key}] found", data=found.data)
            if found.code != RespCode.NOT_FOUND:
                return found

            self.logger.info("%s [%s] not found, creating", resource, natural_key)
            created = add()
            if created.code != 0:
                return created
            return self._ok(msg=f"{resource} [{natural_key}] created", data=created.data)

    def _to_record(self, response: ReturnResponse, model: Type[RecordT]) -> ReturnResponse:
        """Convert a successful dict payload into a typed record.

        Args:
            response: Response holding a dict payload.
            model: Record class.

        Returns:
            ReturnResponse: Record in ``data``; ``BAD_PAYLOAD`` when the
            payload does not validate.
        """
        if response.code != 0:
            return response
        try:
            record = model.model_validate(response.data)
        except ValidationError as exc:
            return self._fail(
                code=RespCode.BAD_PAYLOAD,
                msg=f"{model.__name__} payload is invalid",
                data={"err": str(exc), "payload": response.data},
            )
        return ReturnResponse(code=response.code, msg=response.msg, data=record)

    def _to_records(self, response: ReturnResponse, model: Type[RecordT]) -> ReturnResponse:
        """Convert a successful list payload into typed records.

        Failed paginated responses keep their partial ``results`` converted
        as well. When those do not validate, the original failure code is
        kept, ``results`` stay raw and the error is under ``validation_err``.
        """
        items = response.data if response.code == 0 else None
        if response.code != 0 and isinstance(response.data, dict):
            items = response.data.get("results")
        if not isinstance(items, list):
            return response
        try:
            records = [model.model_validate(item) for item in items]
        except ValidationError as exc:
            if response.code != 0:
                return self._fail(
                    code=response.code,
                    msg=response.msg,
                    data={**response.data, "validation_err": str(exc)},
                )
            return self._fail(
                code=RespCode.BAD_PAYLOAD,
                msg=f"{model.__name__} payload is invalid",
                data={"err": str(exc)},
            )
        if response.code == 0:
            return self._ok(msg=response.msg, data=records)
        return self._fail(code=response.code, msg=response.msg, data={**response.data, "results": records})

    def _cached_site_id(self, physical_address: str) -> Optional[int]:
        with self._site_address_cache_lock:
            return self._site_address_cache.get(physical_address)

    def _cache_site_id(self, physical_address: str, site_id: int) -> None:
        with self._site_address_cache_lock:
            self._site_address_cache[physical_address] = site_id

    def clear_site_cache(self) -> None:
        """Forget every cached ``physical_address -> site id`` entry."""
        with self._site_address_cache_lock:
            self._site_address_cache.clear()

    def get_by_id(self, kind: KindLike, object_id: int) -> ReturnResponse:
        """Get one object by id.

        Args:
            kind: Model kind.
            object_id: Object ID.

        Returns:
            ReturnResponse: Object dict in ``data``.
        """
        path_response = self._model_path(kind)
        if path_response.code != 0:
            return path_response
        return self._request("GET", f"{path_response.data}/{object_id}/")

    def get_by_url(self, url: str) -> ReturnResponse:
        """Get one object by its absolute ``url`` field or a ``next`` link.

        Args:
            url: Absolute URL or path below ``/api``.

        Returns:
            ReturnResponse: Parsed body in ``data``.
        """
        return self._request("GET", url)

    def search(self, kind: KindLike, *args: str) -> ReturnResponse:
        """Search one page of a list endpoint.

        Args:
            kind: Model kind.
            *args: ``key=value`` filters, ANDed and passed through verbatim.

        Returns:
            ReturnResponse: Raw list envelope in ``data``.
        """
        path_response = self._model_path(kind)
        if path_response.code != 0:
            return path_response
        return self._request("GET", self._search_path(path_response.data, args))

    def search_all(self, kind: KindLike, *args: str) -> ReturnResponse:
        """Search a list endpoint and follow every page.

        Args:
            kind: Model kind.
            *args: ``key=value`` filters.

        Returns:
            ReturnResponse: All result dicts in ``data``.
        """
        path_response = self._model_path(kind)
        if path_response.code != 0:
            return path_response
        return self._paginate(self._search_path(path_response.data, args))

    def add_object(self, kind: KindLike, payload: Any) -> ReturnResponse:
        """Create an object.

        Args:
            kind: Model kind.
            payload: Request body.

        Returns:
            ReturnResponse: Created object in ``data``.
        """
        path_response = self._model_path(kind)
        if path_response.code != 0:
            return path_response
        return self.add_object_by_url(f"{path_response.data}/", payload)

    def add_object_by_url(self, url: str, payload: Any) -> ReturnResponse:
        self.logger.debug("adding %s", url)
        return self._request("POST", url, json_data=payload)

    def update_object(self, kind: KindLike, object_id: int, payload: Dict[str, Any]) -> ReturnResponse:
        """Partially update an object with PATCH.

        Args:
            kind: Model kind.
            object_id: Object ID.
            payload: Fields to change; nothing else is sent.

        Returns:
            ReturnResponse: Updated object in ``data``.
        """
        path_response = self._model_path(kind)
        if path_response.code != 0:
            return path_response
        return self.update_object_by_url(f"{path_response.data}/{object_id}/", payload)

    def update_object_by_url(self, url: str, payload: Dict[str, Any]) -> ReturnResponse:
        """PATCH ``payload`` onto the object at ``url``."""
        if not payload:
            return self._fail(
                code=RespCode.INVALID_PARAMS,
                msg=f"PATCH {url} fields are required",
            )
        self.logger.debug("updating %s", url)
        return self._request("PATCH", url, json_data=payload)

    def replace_object(self, kind: KindLike, object_id: int, payload: Dict[str, Any]) -> ReturnResponse:
        """Replace an object with PUT.

        Args:
            kind: Model kind.
            object_id: Object ID.
            payload: Full object body.

        Returns:
            ReturnResponse: Updated object in ``data``.
        """
        path_response = self._model_path(kind)
        if path_response.code != 0:
            return path_response
        return self._request("PUT", f"{path_response.data}/{object_id}/", json_data=payload)

    def delete_object(self, kind: KindLike, object_id: int) -> ReturnResponse:
        path_response = self._model_path(kind)
        if path_response.code != 0:
            return path_response
        return self.delete_object_by_url(f"{path_response.data}/{object_id}/")

    def delete_object_by_url(self, url: str) -> ReturnResponse:
        """Send DELETE to ``url``."""
        self.logger.debug("deleting %s", url)
        return self._request("DELETE", url)
