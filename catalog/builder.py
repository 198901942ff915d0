#/project/catalog/builder.py

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
import logging
from collections import OrderedDict

from catalog.models import (
    ADDRESS,
    ADDRESS_GROUP,
    APPLICATION,
    APPLICATION_GROUP,
    SERVICE,
    SERVICE_GROUP,
    SHARED,
    Address,
    AddressGroup,
    Application,
    Catalog,
    DeviceGroup,
    MemberGroup,
    ScopeObjects,
    Service,
    Zone,
)
from catalog.result import Result, Tally
from parse import xml_helper as xh

DEFAULT_ZONE_FALLBACK_THRESHOLD = 100


def find_device_group_elements(root):
    """Return the device-group elements of the export in document order.

    Two layouts are accepted: ``<device-group name="...">`` elements and the
    Panorama export form ``devices/entry/device-group/entry``. Entries under
    ``readonly`` only carry hierarchy metadata and are never scopes.
    """
    named = [element for element in root.iter('device-group') if element.get('name') is not None]
    if named:
        return named

    return [
        element for element in root.iterfind('.//devices/entry/device-group/entry')
        if not _under_readonly(element)
    ]


def _under_readonly(element):
    parent = element.getparent()
    while parent is not None:
        if parent.tag == 'readonly':
            return True
        parent = parent.getparent()
    return False


def find_shared_element(root):
    if root.tag == 'shared':
        return root
    return root.find('.//shared')


class CatalogBuilder:
    """Walks a parsed Panorama export once and produces a :class:`Catalog`."""

    OBJECT_PATHS = OrderedDict([
        (ADDRESS, 'address/entry'),
        (ADDRESS_GROUP, 'address-group/entry'),
        (SERVICE, 'service/entry'),
        (SERVICE_GROUP, 'service-group/entry'),
        (APPLICATION, 'application/entry'),
        (APPLICATION_GROUP, 'application-group/entry'),
    ])

    def __init__(self, logger=None, zone_fallback_threshold=DEFAULT_ZONE_FALLBACK_THRESHOLD):
        self.logger = logger or logging.getLogger(__name__)
        self.zone_fallback_threshold = zone_fallback_threshold
        self.stats = {}

    def tally(self, kind):
        return self.stats.setdefault(kind, Tally())

    def build(self, root):
        self.stats = {}
        self.logger.info("Starting catalog building process")

        device_group_elements = find_device_group_elements(root)
        device_groups = self.build_device_groups(root, device_group_elements)
        self.logger.info(f"Device groups built: {len(device_groups)}")

        scopes = self._scope_elements(device_group_elements, device_groups)
        objects = self.build_objects(root, scopes)
        catalog = Catalog(device_groups=device_groups, objects=objects)
        self.logger.info(f"Objects catalog built: {catalog.object_count()} objects across {len(objects)} scopes")

        catalog.zones = self.build_zones(root, scopes)
        self.logger.info(f"Zones catalog built: {len(catalog.zones)} zones")

        for kind, tally in self.stats.items():
            if tally.skipped_count:
                self.logger.warning(f"Catalog {kind}: {tally.summary()}")
            else:
                self.logger.debug(f"Catalog {kind}: {tally.summary()}")

        return catalog

    def issue_count(self):
        return sum(tally.skipped_count for tally in self.stats.values())

    def _scope_elements(self, device_group_elements, device_groups):
        scopes = OrderedDict()
        for element in device_group_elements:
            name = xh.get_attribute(element, 'name')
            if name in device_groups and name not in scopes:
                scopes[name] = element
        return scopes

    # ------------------------------------------------------------------ device groups

    def build_device_groups(self, root, elements):
        readonly_parents = self._readonly_parents(root)
        parents = OrderedDict()
        tally = self.tally('device-group')

        for index, element in enumerate(elements):
            result = tally.record(self._parse_device_group(element, index, parents, readonly_parents))
            if result.ok:
                name, parent = result.value
                parents[name] = parent

        children = {name: [] for name in parents}
        for name, parent in list(parents.items()):
            if parent is None:
                continue
            if parent not in parents:
                self.logger.warning(f"Device group '{name}' references missing parent '{parent}', treating it as a root")
                tally.skipped['missing parent'] += 1
                parents[name] = None
                continue
            if name not in children[parent]:
                children[parent].append(name)

        device_groups = OrderedDict()
        for name, parent in parents.items():
            path = self.compute_path(name, parents, [])
            device_groups[name] = DeviceGroup(
                name=name,
                parent=parent,
                children=tuple(children[name]),
                path=tuple(path),
            )
            self.logger.debug(f"Device group '{name}' path: {' > '.join(path)}")

        return device_groups

    def _parse_device_group(self, element, index, seen, readonly_parents):
        name = xh.get_attribute(element, 'name')
        if not name:
            self.logger.warning(f"Device group element #{index} is missing its name attribute")
            return Result.failure('missing name')
        if name in seen:
            self.logger.warning(f"Duplicate device group '{name}' ignored")
            return Result.failure('duplicate name')

        parent = xh.find_text(element, 'parent') or xh.find_text(element, 'parent-dg') or readonly_parents.get(name)
        if parent == name:
            self.logger.warning(f"Device group '{name}' lists itself as parent, treating it as a root")
            parent = None
        if parent:
            self.logger.debug(f"Device group parent relationship found: {name} -> {parent}")
        return Result.success((name, parent or None))

    def _readonly_parents(self, root):
        parents = {}
        for entry in root.iterfind('.//readonly/devices/entry/device-group/entry'):
            name = xh.get_attribute(entry, 'name')
            parent = xh.find_text(entry, 'parent-dg')
            if name and parent:
                parents[name] = parent
        return parents

    def compute_path(self, name, parents, visited):
        """Ancestor path for ``name``, outermost first. A parent cycle is cut at the revisited node."""
        if name in visited:
            self.logger.warning(f"Circular reference detected in device group hierarchy at '{name}': {' > '.join(visited)}")
            self.tally('device-group').skipped['parent cycle'] += 1
            return [name]
        if name not in parents:
            return [name]

        parent = parents[name]
        if parent is None:
            return [name]
        return self.compute_path(parent, parents, visited + [name]) + [name]

    # ------------------------------------------------------------------ objects

    def build_objects(self, root, scopes):
        objects = OrderedDict()

        shared = find_shared_element(root)
        if shared is None:
            self.logger.info("No shared configuration found")
            objects[SHARED] = ScopeObjects()
        else:
            objects[SHARED] = self.build_scope_objects(shared, SHARED)

        for name, element in scopes.items():
            objects[name] = self.build_scope_objects(element, name)
            self.logger.debug(f"Device group '{name}' objects built: {objects[name].count()}")

        return objects

    def build_scope_objects(self, scope_element, scope_name):
        scope_objects = ScopeObjects()
        for object_type, path in self.OBJECT_PATHS.items():
            tally = self.tally(object_type)
            table = scope_objects.table(object_type)
            for index, entry in enumerate(xh.find_all(scope_element, path)):
                name = xh.get_attribute(entry, 'name')
                if not name:
                    self.logger.warning(f"{object_type} entry #{index} in scope '{scope_name}' is missing its name attribute")
                    tally.record(Result.failure('missing name'))
                    continue
                result = tally.record(self.parse_object(object_type, entry, name, scope_name))
                if result.value is not None:
                    table[name] = result.value
        return scope_objects

    def parse_object(self, object_type, entry, name, scope_name):
        parser = {
            ADDRESS: self.parse_address,
            ADDRESS_GROUP: self.parse_address_group,
            SERVICE: self.parse_service,
            SERVICE_GROUP: self.parse_member_group,
            APPLICATION: self.parse_application,
            APPLICATION_GROUP: self.parse_member_group,
        }[object_type]
        try:
            return parser(entry, name, scope_name)
        except (AttributeError, TypeError, ValueError) as e:
            self.logger.warning(f"Failed to parse {object_type} '{name}' in scope '{scope_name}': {e}")
            return Result.failure('parse error')

    def parse_address(self, entry, name, scope_name):
        ip_netmask = xh.find_text(entry, 'ip-netmask')
        if ip_netmask:
            return Result.success(Address(kind='cidr' if '/' in ip_netmask else 'ip', value=ip_netmask))

        ip_range = xh.find_text(entry, 'ip-range')
        if ip_range:
            return Result.success(Address(kind='range', value=ip_range))

        fqdn = xh.find_text(entry, 'fqdn')
        if fqdn:
            return Result.success(Address(kind='fqdn', value=fqdn))

        self.logger.warning(f"Address '{name}' in scope '{scope_name}' has no recognizable type")
        return Result.failure('unrecognized address', Address(kind='unknown', value=''))

    def parse_address_group(self, entry, name, scope_name):
        static = entry.find('static')
        if static is not None:
            return Result.success(AddressGroup(kind='static', members=tuple(xh.get_members(static))))

        dynamic = entry.find('dynamic')
        if dynamic is not None:
            return Result.success(AddressGroup(kind='dynamic', match=xh.find_text(dynamic, 'filter')))

        self.logger.warning(f"Address group '{name}' in scope '{scope_name}' has no recognizable type")
        return Result.failure('unrecognized address group', AddressGroup(kind='static'))

    def parse_service(self, entry, name, scope_name):
        protocol = entry.find('protocol')
        if protocol is None:
            self.logger.warning(f"Service '{name}' in scope '{scope_name}' has no protocol")
            return Result.failure('missing protocol', Service(proto='other'))

        for proto in xh.children(protocol):
            if proto.tag in ('tcp', 'udp'):
                ports = []
                for port in xh.find_text(proto, 'port').split(','):
                    port = port.strip()
                    if port:
                        ports.append(port)
                return Result.success(Service(proto=proto.tag, ports=tuple(ports)))
            return Result.success(Service(proto=proto.tag))

        return Result.success(Service(proto='other'))

    def parse_member_group(self, entry, name, scope_name):
        return Result.success(MemberGroup(members=tuple(xh.get_members(entry, 'members'))))

    def parse_application(self, entry, name, scope_name):
        return Result.success(Application(name=name))

    # ------------------------------------------------------------------ zones

    def build_zones(self, root, scopes):
        zones = OrderedDict()
        tally = self.tally('zone')

        shared = find_shared_element(root)
        for name in xh.get_entry_names(shared, './/zone/entry'):
            if name not in zones:
                zones[name] = Zone(name=name, scope=SHARED)
                tally.processed += 1

        for device_group, element in scopes.items():
            for name in xh.get_entry_names(element, './/zone/entry'):
                zone = zones.get(name)
                if zone is None:
                    zones[name] = Zone(name=name, scope=device_group, device_groups=(device_group,))
                elif device_group not in zone.device_groups:
                    zones[name] = Zone(name=zone.name, scope=zone.scope, device_groups=zone.device_groups + (device_group,))
                tally.processed += 1

        if len(zones) < self.zone_fallback_threshold:
            self.logger.debug(f"Only {len(zones)} zones found, scanning all devices and templates for zones")
            for name in xh.get_entry_names(root, './/devices//zone/entry'):
                if name not in zones:
                    zones[name] = Zone(name=name, scope='Global')
                    tally.processed += 1

        return zones
