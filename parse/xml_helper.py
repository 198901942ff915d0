#/project/parse/xml_helper.py

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
"""Small null-safe accessors over lxml elements.

Every helper accepts ``None`` in place of an element so callers can chain
lookups on optional configuration sections without guarding each step.
"""


def find(element, path):
    if element is None:
        return None
    return element.find(path)


def find_all(element, path):
    if element is None:
        return []
    return element.findall(path)


def get_attribute(element, attribute, default=''):
    if element is None:
        return default
    value = element.get(attribute)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def get_text(element, default=''):
    if element is None or element.text is None:
        return default
    text = element.text.strip()
    return text if text else default


def find_text(element, path, default=''):
    return get_text(find(element, path), default)


def children(element):
    """Immediate child elements, skipping comments and processing instructions."""
    if element is None:
        return []
    return [child for child in element if isinstance(child.tag, str)]


def get_members(element, path=None):
    """Return the member names under ``element`` (optionally under ``path``).

    Handles both ``<member>name</member>`` and ``<member name="name"/>``.
    Empty members are dropped.
    """
    parent = find(element, path) if path else element
    members = []
    for member in find_all(parent, 'member'):
        name = get_attribute(member, 'name') or get_text(member)
        if name:
            members.append(name)
    return members


def get_entry_names(element, path):
    names = []
    for entry in find_all(element, path):
        name = get_attribute(entry, 'name')
        if name:
            names.append(name)
    return names


def to_bool(value, default=False):
    if value is None:
        return default
    if not isinstance(value, str):
        return default
    value = value.strip().lower()
    if value in ('yes', 'true', '1'):
        return True
    if value in ('no', 'false', '0', ''):
        return False
    return default
