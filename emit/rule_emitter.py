#/project/emit/rule_emitter.py

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
import re
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Tuple

from catalog.builder import find_device_group_elements
from catalog.models import ADDRESS, APPLICATION, SERVICE
from catalog.result import Result, Tally
from emit.document import empty_document, to_ndjson
from parse import xml_helper as xh
from resolve import ZONE
from resolve.outcome import DYNAMIC_PREFIX, is_marker

APPLICATION_DEFAULT = 'application-default'

# (xml container, rulebase label) in processing order
RULEBASES = (
    ('pre-rulebase', 'pre-rules'),
    ('rulebase', 'rules'),
    ('post-rulebase', 'post-rules'),
)

MARKER_FIELDS = ('from_zones', 'to_zones', 'src_addresses', 'dst_addresses', 'applications', 'services', 'users', 'tags')

_PORT_SERVICE = re.compile(r'^(tcp|udp)/(.+)$')


@dataclass
class EmitStats:
    rules: Tally = field(default_factory=Tally)
    device_groups: Tally = field(default_factory=Tally)
    per_rulebase: Dict[Tuple[str, str], int] = field(default_factory=dict)
    resolution: Counter = field(default_factory=Counter)

    @property
    def rules_processed(self) -> int:
        return self.rules.processed

    @property
    def rules_skipped(self) -> int:
        return self.rules.skipped_count

    @property
    def device_groups_processed(self) -> int:
        return self.device_groups.processed

    @property
    def device_groups_failed(self) -> int:
        return self.device_groups.skipped_count

    def rulebase_totals(self) -> Counter:
        """Rule entries found per rulebase label across all device groups."""
        totals = Counter()
        for (_, rulebase), count in self.per_rulebase.items():
            totals[rulebase] += count
        return totals


class RuleEmitter:
    """Turns every security rule of every device group into one NDJSON document."""

    def __init__(self, tenant, snapshot_date, resolver, logger=None):
        self.tenant = tenant
        self.snapshot_date = snapshot_date
        self.resolver = resolver
        self.logger = logger or logging.getLogger(__name__)

    def emit_security_rules_as_ndjson(self, root, stream):
        """ Write one JSON line per security rule to ``stream`` and return the run's :class:`EmitStats`. """
        start_time = time.time()
        stats = EmitStats()
        self.logger.info(f"Starting rule emission for tenant '{self.tenant}', snapshot {self.snapshot_date}")

        for document in self.iter_documents(root, stats):
            stream.write(to_ndjson(document))

        totals = stats.rulebase_totals()
        self.logger.info(
            f"Rule emission completed: {stats.rules.summary()}, "
            f"device groups: {stats.device_groups.summary()}, "
            f"in {time.time() - start_time:.2f} seconds"
        )
        self.logger.info("Rule entries per rulebase: " + ', '.join(f"{rulebase}: {totals[rulebase]}" for _, rulebase in RULEBASES))
        return stats

    def iter_documents(self, root, stats=None):
        stats = stats if stats is not None else EmitStats()
        device_groups = find_device_group_elements(root)
        if not device_groups:
            self.logger.warning("No device groups found for rule processing")
            return

        seen = set()
        for element in device_groups:
            name = xh.get_attribute(element, 'name')
            if not name:
                stats.device_groups.record(Result.failure('missing name'))
                self.logger.warning("Device group element missing name attribute, skipping its rules")
                continue
            if name in seen:
                stats.device_groups.record(Result.failure('duplicate device group'))
                self.logger.warning(f"Duplicate device group '{name}' ignored, skipping its rules")
                continue
            seen.add(name)

            count = 0
            for container, rulebase in RULEBASES:
                rules = xh.find_all(element, f"{container}/security/rules/entry")
                if not rules:
                    self.logger.debug(f"No {rulebase} found for device group '{name}'")
                for position, rule in enumerate(rules, start=1):
                    result = stats.rules.record(self.build_document(rule, name, rulebase, position, stats.resolution))
                    if result.ok:
                        count += 1
                        yield result.value
                stats.per_rulebase[(name, rulebase)] = len(rules)

            stats.device_groups.record(Result.success(name))
            self.logger.debug(f"Device group '{name}': {count} rule documents")

    def build_document(self, rule, device_group, rulebase, position, resolution_counts=None):
        """ Build the document for one rule. Returns a failed :class:`Result` instead of raising. """
        rule_name = xh.get_attribute(rule, 'name')
        if not rule_name:
            self.logger.warning(f"Rule #{position} in {device_group}/{rulebase} is missing its name attribute")
            return Result.failure('missing name')

        try:
            document = empty_document(
                self.tenant,
                self.snapshot_date,
                device_group,
                self.resolver.catalog.device_group_path(device_group),
                rulebase,
                rule_name,
                position,
            )
            document['action'] = self.extract_action(rule)
            document['disabled'] = self.extract_disabled(rule)
            document['targets'] = self.extract_targets(rule)
            document['orig'] = self.extract_original(rule)
            document['expanded'] = self.expand(document['orig'], device_group, resolution_counts)
            document['meta'] = self.build_meta(document['expanded'])
        except Exception as e:
            self.logger.error(f"Failed to build document for rule '{rule_name}' ({device_group}/{rulebase} #{position}): {e}", exc_info=True)
            return Result.failure('build error')

        return Result.success(document)

    def extract_action(self, rule):
        return xh.find_text(rule, 'action', 'allow')

    def extract_disabled(self, rule):
        return xh.to_bool(xh.find_text(rule, 'disabled', 'no'))

    def extract_targets(self, rule):
        targets = {'include': [], 'exclude': []}
        target = rule.find('target')
        if target is None:
            return targets

        devices = xh.get_entry_names(target, 'devices/entry')
        if xh.to_bool(xh.find_text(target, 'negate')):
            targets['exclude'].extend(devices)
        else:
            targets['include'].extend(devices)
        for device in xh.get_entry_names(target, 'excluded-devices/entry'):
            if device not in targets['exclude']:
                targets['exclude'].append(device)
        return targets

    def extract_original(self, rule):
        return {
            'from_zones': xh.get_members(rule, 'from'),
            'to_zones': xh.get_members(rule, 'to'),
            'sources': xh.get_members(rule, 'source'),
            'destinations': xh.get_members(rule, 'destination'),
            'applications': xh.get_members(rule, 'application'),
            'services': xh.get_members(rule, 'service'),
            'users': xh.get_members(rule, 'source-user'),
            'tags': xh.get_members(rule, 'tag'),
            'profiles': self.extract_profiles(rule),
            'comments': xh.find_text(rule, 'description'),
        }

    def extract_profiles(self, rule):
        profiles = {'group': None, 'names': []}
        profile_setting = rule.find('profile-setting')
        if profile_setting is None:
            return profiles

        group = xh.get_members(profile_setting, 'group')
        if group:
            profiles['group'] = group[0]

        for profile_type in xh.children(profile_setting.find('profiles')):
            profiles['names'].extend(xh.get_members(profile_type))
        return profiles

    def expand(self, orig, device_group, resolution_counts=None):
        def resolve(category, names):
            resolution = self.resolver.resolve(category, device_group, names)
            if resolution_counts is not None:
                resolution_counts.update(resolution.counts())
            return resolution.values

        if orig['services'] == [APPLICATION_DEFAULT]:
            services = [APPLICATION_DEFAULT]
        else:
            services = resolve(SERVICE, orig['services'])

        return {
            'from_zones': resolve(ZONE, orig['from_zones']),
            'to_zones': resolve(ZONE, orig['to_zones']),
            'src_addresses': resolve(ADDRESS, orig['sources']),
            'dst_addresses': resolve(ADDRESS, orig['destinations']),
            'applications': resolve(APPLICATION, orig['applications']),
            'services': services,
            'ports': self.extract_ports(services),
            'users': list(orig['users']),
            'tags': list(orig['tags']),
        }

    @staticmethod
    def extract_ports(services):
        ports = []
        for service in services:
            match = _PORT_SERVICE.match(service) if isinstance(service, str) else None
            if match and match.group(2) not in ports:
                ports.append(match.group(2))
        return ports

    @staticmethod
    def build_meta(expanded):
        dynamic_groups = []
        unresolved = []
        for field_name in MARKER_FIELDS:
            for item in expanded.get(field_name, []):
                if not is_marker(item):
                    continue
                if item.startswith(DYNAMIC_PREFIX):
                    if item not in dynamic_groups:
                        dynamic_groups.append(item)
                elif item not in unresolved:
                    unresolved.append(item)

        return {
            'has_dynamic_groups': bool(dynamic_groups),
            'dynamic_groups_unresolved': dynamic_groups,
            'unresolved_notes': '; '.join(f"Unresolved reference: {item}" for item in unresolved),
        }
