#/project/emit/document.py

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
# Helpers for shaping rule documents for bulk load into the search index.
import json
import re

_UID_UNSAFE = re.compile(r'[^a-zA-Z0-9._-]')
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')


def sanitize_uid_component(component):
    return _UID_UNSAFE.sub('_', str(component))


def generate_rule_uid(device_group, rulebase, position, rule_name):
    return ':'.join([
        sanitize_uid_component(device_group),
        sanitize_uid_component(rulebase),
        str(int(position)),
        sanitize_uid_component(rule_name),
    ])


def sanitize_value(value):
    """Strip control characters (except tab, newline and carriage return) from every string."""
    if isinstance(value, str):
        return _CONTROL_CHARS.sub('', value)
    if isinstance(value, dict):
        return {key: sanitize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item) for item in value]
    return value


def to_ndjson(document):
    return json.dumps(sanitize_value(document), ensure_ascii=False, separators=(',', ':')) + '\n'


def empty_document(tenant, snapshot_date, device_group, device_group_path, rulebase, rule_name, position):
    return {
        'panorama_tenant': tenant,
        'snapshot_date': snapshot_date,
        'device_group': device_group,
        'device_group_path': list(device_group_path),
        'rulebase': rulebase,
        'rule_name': rule_name,
        'rule_uid': generate_rule_uid(device_group, rulebase, position, rule_name),
        'position': position,
        'action': 'allow',
        'disabled': False,
        'targets': {'include': [], 'exclude': []},
        'orig': {},
        'expanded': {},
        'meta': {
            'has_dynamic_groups': False,
            'dynamic_groups_unresolved': [],
            'unresolved_notes': '',
        },
    }
