#/project/resolve/__init__.py

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
from collections.abc import Iterable

from catalog.models import (
    ADDRESS,
    ADDRESS_GROUP,
    APPLICATION,
    APPLICATION_GROUP,
    SERVICE,
    SERVICE_GROUP,
)
from resolve.outcome import (
    ANY,
    Outcome,
    OutcomeKind,
    Resolution,
    cycle,
    dynamic,
    unknown,
)

ZONE = 'zone'


class ReferenceResolver:
    """Resolves names referenced by rules against a built :class:`~catalog.Catalog`.

    Lookup follows the device-group inheritance chain with the closest scope
    winning: the scope itself, then its ancestors from nearest to outermost, then
    ``Shared``. Static groups are expanded recursively, dynamic address groups
    become ``DAG:<name>``, names found nowhere become ``UNKNOWN:<name>`` and a
    group reached again while it is still being expanded becomes ``CYCLE:<name>``.

    Every public call is total: malformed input or catalog records never raise,
    they turn into a marker for the offending name. The resolver holds no state
    besides the catalog, so one instance can serve any number of callers.
    """

    # category -> (leaf table, group table)
    CATEGORIES = {
        ADDRESS: (ADDRESS, ADDRESS_GROUP),
        SERVICE: (SERVICE, SERVICE_GROUP),
        APPLICATION: (APPLICATION, APPLICATION_GROUP),
    }

    def __init__(self, catalog, logger=None):
        self.catalog = catalog
        self.logger = logger or logging.getLogger(__name__)

    def expand_addresses(self, scope, names):
        return self.resolve(ADDRESS, scope, names).values

    def expand_services(self, scope, names):
        return self.resolve(SERVICE, scope, names).values

    def expand_applications(self, scope, names):
        return self.resolve(APPLICATION, scope, names).values

    def resolve_zones(self, scope, names):
        return self.resolve(ZONE, scope, names).values

    zones_for = resolve_zones

    def resolve(self, category, scope, names):
        """Resolve a batch of names and keep the per-name outcomes."""
        resolution = Resolution(category=category, scope=scope)
        if names is None:
            return resolution
        if isinstance(names, str) or not isinstance(names, Iterable):
            names = [names]
        names = list(names)
        if not names:
            return resolution

        self.logger.debug(f"Expanding {len(names)} {category} reference(s) for scope '{scope}'")

        for name in names:
            if not isinstance(name, str) or not name.strip():
                self.logger.warning(f"Invalid {category} name {name!r} skipped for scope '{scope}'")
                resolution.outcomes.append(Outcome(name=name, kind=OutcomeKind.INVALID))
                continue
            resolution.outcomes.append(self.resolve_name(category, scope, name.strip()))

        failed = sum(1 for outcome in resolution.outcomes if outcome.kind in (OutcomeKind.INVALID, OutcomeKind.ERROR))
        if failed:
            self.logger.warning(f"{failed} of {len(names)} {category} reference(s) failed to expand for scope '{scope}'")
        return resolution

    def resolve_name(self, category, scope, name):
        try:
            if category == ZONE:
                return self._resolve_zone(name)
            return self._expand(category, scope, name, [])
        except Exception as e:
            self.logger.warning(f"Failed to expand {category} '{name}' for scope '{scope}': {e}", exc_info=True)
            return Outcome(name=name, kind=OutcomeKind.ERROR, values=(unknown(name),))

    def _resolve_zone(self, name):
        if name == ANY:
            return Outcome(name=name, kind=OutcomeKind.PASSTHROUGH, values=(ANY,))
        if name in (self.catalog.zones or {}):
            return Outcome(name=name, kind=OutcomeKind.RESOLVED, values=(name,))
        return Outcome(name=name, kind=OutcomeKind.UNKNOWN, values=(unknown(name),))

    def _expand(self, category, scope, name, stack):
        if name == ANY:
            return Outcome(name=name, kind=OutcomeKind.PASSTHROUGH, values=(ANY,))

        key = (category, scope, name)
        if key in stack:
            self.logger.warning(
                f"Cycle detected in {category} expansion for '{name}' in scope '{scope}': "
                f"{' > '.join(entry[2] for entry in stack)} > {name}"
            )
            return Outcome(name=name, kind=OutcomeKind.CYCLE, values=(cycle(name),))

        leaf_type, group_type = self.CATEGORIES[category]
        stack.append(key)
        try:
            for path_scope in self.catalog.lookup_path(scope):
                scope_objects = self.catalog.scope_objects(path_scope)
                if scope_objects is None:
                    continue

                leaf = scope_objects.table(leaf_type).get(name)
                if leaf is not None:
                    values = self._format_leaf(category, name, leaf)
                    if values:
                        return Outcome(name=name, kind=OutcomeKind.RESOLVED, values=tuple(values))
                    self.logger.warning(f"{category} object '{name}' in scope '{path_scope}' has an empty value")

                group = scope_objects.table(group_type).get(name)
                if group is not None:
                    return self._expand_group(category, scope, name, group, stack)

            return Outcome(name=name, kind=OutcomeKind.UNKNOWN, values=(unknown(name),))
        finally:
            stack.pop()

    def _expand_group(self, category, scope, name, group, stack):
        if getattr(group, 'is_dynamic', False):
            return Outcome(name=name, kind=OutcomeKind.DYNAMIC, values=(dynamic(name),))

        members = getattr(group, 'members', None)
        if not isinstance(members, (list, tuple)):
            self.logger.warning(f"{category} group '{name}' for scope '{scope}' has no usable member list")
            members = ()

        values = []
        for member in members:
            if not isinstance(member, str) or not member.strip():
                self.logger.warning(f"Skipping invalid member {member!r} of {category} group '{name}'")
                continue
            try:
                outcome = self._expand(category, scope, member.strip(), stack)
            except Exception as e:
                self.logger.warning(f"Failed to expand member '{member}' of {category} group '{name}': {e}")
                outcome = Outcome(name=member, kind=OutcomeKind.ERROR, values=(unknown(member),))
            values.extend(outcome.values)

        return Outcome(name=name, kind=OutcomeKind.RESOLVED, values=tuple(values))

    def _format_leaf(self, category, name, leaf):
        if category == ADDRESS:
            value = getattr(leaf, 'value', None)
            return [value] if isinstance(value, str) and value else []
        if category == SERVICE:
            return self.format_service(leaf)
        return [name]

    @staticmethod
    def format_service(service):
        proto = getattr(service, 'proto', None) or 'unknown'
        ports = getattr(service, 'ports', None)
        if not isinstance(ports, (list, tuple)):
            return [proto]

        formatted = [f"{proto}/{port}" for port in ports if port]
        return formatted or [proto]
