#/project/catalog/models.py

"""
ISC License

Copyright (c) 2023 Eric Chickering <eric.chickering@gmail.com>

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION
OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN
CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""
# Lookup structures produced by the catalog builder and consumed by the resolver.
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

SHARED = 'Shared'

ADDRESS = 'address'
ADDRESS_GROUP = 'address-group'
SERVICE = 'service'
SERVICE_GROUP = 'service-group'
APPLICATION = 'application'
APPLICATION_GROUP = 'application-group'

OBJECT_TYPES = (ADDRESS, ADDRESS_GROUP, SERVICE, SERVICE_GROUP, APPLICATION, APPLICATION_GROUP)


@dataclass(frozen=True)
class DeviceGroup:
    """A device group and its resolved ancestor path (outermost first, ending in ``name``)."""

    name: str
    parent: Optional[str] = None
    children: Tuple[str, ...] = ()
    path: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Address:
    kind: str
    value: str


@dataclass(frozen=True)
class AddressGroup:
    kind: str = 'static'
    members: Tuple[str, ...] = ()
    match: Optional[str] = None

    @property
    def is_dynamic(self) -> bool:
        return self.kind == 'dynamic'


@dataclass(frozen=True)
class Service:
    proto: str
    ports: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MemberGroup:
    """Service group or application group."""

    members: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Application:
    name: str


@dataclass(frozen=True)
class Zone:
    name: str
    scope: str = SHARED
    device_groups: Tuple[str, ...] = ()


@dataclass
class ScopeObjects:
    """The six object tables owned by one scope."""

    address: Dict[str, Address] = field(default_factory=dict)
    address_group: Dict[str, AddressGroup] = field(default_factory=dict)
    service: Dict[str, Service] = field(default_factory=dict)
    service_group: Dict[str, MemberGroup] = field(default_factory=dict)
    application: Dict[str, Application] = field(default_factory=dict)
    application_group: Dict[str, MemberGroup] = field(default_factory=dict)

    def table(self, object_type: str) -> Dict[str, object]:
        if object_type not in OBJECT_TYPES:
            raise KeyError(f"Unknown object type: {object_type}")
        return getattr(self, object_type.replace('-', '_'))

    def count(self) -> int:
        return sum(len(self.table(object_type)) for object_type in OBJECT_TYPES)


@dataclass
class Catalog:
    device_groups: Dict[str, DeviceGroup] = field(default_factory=dict)
    objects: Dict[str, ScopeObjects] = field(default_factory=dict)
    zones: Dict[str, Zone] = field(default_factory=dict)

    def device_group_path(self, name: str) -> List[str]:
        device_group = self.device_groups.get(name)
        if device_group is None or not device_group.path:
            return [name]
        return list(device_group.path)

    def lookup_path(self, scope: str) -> List[str]:
        """Scopes to search for a name referenced from ``scope``, closest scope first.

        Stored paths run outermost to innermost, so the path is walked in reverse
        and ``Shared`` is consulted last. A scope unknown to the catalog is its
        own single-element path.
        """
        path = list(dict.fromkeys(reversed(self.device_group_path(scope))))
        if SHARED not in path:
            path.append(SHARED)
        return path

    def scope_objects(self, scope: str) -> Optional[ScopeObjects]:
        return self.objects.get(scope)

    def object_count(self) -> int:
        return sum(scope_objects.count() for scope_objects in self.objects.values())

    @classmethod
    def from_mapping(cls, data):
        """Build a catalog from plain dictionaries.

        Accepts the ``{'deviceGroups': ..., 'objects': ..., 'zones': ...}`` layout
        used by fixtures and JSON dumps. Records missing fields degrade to empty
        values instead of raising.
        """
        data = data or {}
        device_groups = {}
        for name, entry in (data.get('deviceGroups') or data.get('device_groups') or {}).items():
            entry = entry if isinstance(entry, dict) else {}
            device_groups[name] = DeviceGroup(
                name=name,
                parent=entry.get('parent'),
                children=tuple(entry.get('children') or ()),
                path=tuple(entry.get('path') or (name,)),
            )

        objects = {}
        for scope, tables in (data.get('objects') or {}).items():
            objects[scope] = _scope_objects_from_mapping(tables if isinstance(tables, dict) else {})

        zones = {}
        for name, entry in (data.get('zones') or {}).items():
            entry = entry if isinstance(entry, dict) else {}
            zones[name] = Zone(
                name=name,
                scope=entry.get('scope', SHARED),
                device_groups=tuple(entry.get('deviceGroups') or ()),
            )

        return cls(device_groups=device_groups, objects=objects, zones=zones)


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def _as_members(value):
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(value)


def _scope_objects_from_mapping(tables):
    scope_objects = ScopeObjects()

    for name, record in _as_dict(tables.get(ADDRESS)).items():
        record = _as_dict(record)
        scope_objects.address[name] = Address(kind=record.get('kind', 'unknown'), value=record.get('value') or '')

    for name, record in _as_dict(tables.get(ADDRESS_GROUP)).items():
        record = _as_dict(record)
        scope_objects.address_group[name] = AddressGroup(
            kind=record.get('kind', 'static'),
            members=_as_members(record.get('members')),
            match=record.get('match'),
        )

    for name, record in _as_dict(tables.get(SERVICE)).items():
        record = _as_dict(record)
        scope_objects.service[name] = Service(proto=record.get('proto') or 'unknown', ports=_as_members(record.get('ports')))

    for name, record in _as_dict(tables.get(SERVICE_GROUP)).items():
        scope_objects.service_group[name] = MemberGroup(members=_as_members(_as_dict(record).get('members')))

    for name, record in _as_dict(tables.get(APPLICATION)).items():
        scope_objects.application[name] = Application(name=_as_dict(record).get('name', name))

    for name, record in _as_dict(tables.get(APPLICATION_GROUP)).items():
        scope_objects.application_group[name] = MemberGroup(members=_as_members(_as_dict(record).get('members')))

    return scope_objects
