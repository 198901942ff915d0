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
import argparse
import sys

from lxml import etree

from parse.exceptions import XmlParsingError
from parse.xml_loader import PanoramaXmlLoader

ZONE_PATTERNS = [
    ('.//zone/entry', 'Zone entries'),
    ('.//shared//zone/entry', 'Zone entries under shared'),
    ('.//device-group//zone/entry', 'Zone entries under device-group'),
    ('.//devices//zone/entry', 'Zone entries under devices'),
    ('.//devices/entry/device-group/entry//zone/entry', 'Zone entries in nested device groups'),
]

STRUCTURE_PATTERNS = [
    ('.//shared', 'Shared sections'),
    ('.//device-group', 'device-group elements'),
    ('.//devices/entry/device-group/entry', 'Nested device group entries'),
    ('.//pre-rulebase/security/rules/entry', 'Security pre-rules'),
    ('.//rulebase/security/rules/entry', 'Security local rules'),
    ('.//post-rulebase/security/rules/entry', 'Security post-rules'),
]

APPLICATION_PATTERNS = [
    ('.//shared/application/entry', 'Shared applications'),
    ('.//shared/application-group/entry', 'Shared application groups'),
    ('.//device-group/entry/application/entry', 'Device group applications'),
    ('.//device-group/entry/application-group/entry', 'Device group application groups'),
]


def count_patterns(root, patterns, examples=3):
    """Return ``[(description, count, example_names)]`` for each ElementPath pattern."""
    report = []
    for path, description in patterns:
        elements = root.findall(path)
        names = [element.get('name') for element in elements if element.get('name')]
        report.append((description, len(elements), names[:examples]))
    return report


def find_named(root, name):
    """XPath of every element whose name attribute equals ``name``."""
    tree = root.getroottree()
    return [tree.getpath(element) for element in root.iter(etree.Element) if element.get('name') == name]


def find_enclosing_element(tree, line_number):
    deepest_element = None
    for element in tree.iter(etree.Element):
        if element.sourceline is None:
            continue
        if element.sourceline <= line_number:
            # Found a candidate element, check if it's the deepest one
            deepest_element = element
        else:
            break
    return deepest_element


def get_xpath_and_line(xml_file, line_number):
    tree = etree.parse(xml_file, etree.XMLParser(huge_tree=True))
    line_content, xpath = None, None

    with open(xml_file, 'r', encoding='utf-8', errors='replace') as file:
        for current_line, content in enumerate(file, start=1):
            if current_line == line_number:
                line_content = content.strip()
                enclosing_element = find_enclosing_element(tree, line_number)
                if enclosing_element is not None:
                    xpath = tree.getpath(enclosing_element)
                break

    return xpath, line_content


def print_report(title, report):
    print(title)
    for description, count, names in report:
        print(f"  {description:<45}: {count} matches")
        if names:
            suffix = f" ... and {count - len(names)} more" if count > len(names) else ""
            print(f"    e.g. {', '.join(names)}{suffix}")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Inspect a Panorama XML export before ingesting it")
    parser.add_argument('file', help="Path to the Panorama XML export file")
    parser.add_argument('-l', '--line', type=int, help="Show the XPath of the element enclosing this line")
    parser.add_argument('-n', '--name', type=str, help="List every element whose name attribute matches")
    args = parser.parse_args(argv)

    try:
        root = PanoramaXmlLoader().load(args.file)
    except XmlParsingError as e:
        print(f"Failed to parse XML file: {e}")
        for error in e.context.get('xml_errors', []):
            print(f"  {error}")
        return 1

    print(f"XML parsed successfully, root element: <{root.tag}>\n")

    if args.line:
        xpath, line_content = get_xpath_and_line(args.file, args.line)
        print(f'XPath of line {args.line}: {xpath}')
        print(f'Content of line {args.line}: {line_content}')
        return 0

    if args.name:
        paths = find_named(root, args.name)
        print(f"Found {len(paths)} elements with name='{args.name}'")
        for path in paths:
            print(f"  {path}")
        return 0

    print_report("Structure:", count_patterns(root, STRUCTURE_PATTERNS))
    print_report("Zones:", count_patterns(root, ZONE_PATTERNS))
    print_report("Applications:", count_patterns(root, APPLICATION_PATTERNS))
    return 0


if __name__ == "__main__":
    sys.exit(main())
