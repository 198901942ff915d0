#/project/parse/xml_loader.py

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
import os

from lxml import etree

from parse.exceptions import (
    XmlEmptyFileError,
    XmlFileNotFoundError,
    XmlFileNotReadableError,
    XmlNotAFileError,
    XmlParsingError,
    XmlSyntaxError,
)


class PanoramaXmlLoader:
    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        # huge_tree lifts the libxml2 depth and text node size limits
        self.parser = etree.XMLParser(huge_tree=True, strip_cdata=True, resolve_entities=False, no_network=True)

    def load(self, file_path):
        """ Validate and parse a Panorama XML export, returning the root element. """
        self.validate_file(file_path)

        try:
            tree = etree.parse(file_path, self.parser)
        except etree.XMLSyntaxError as e:
            error = XmlSyntaxError.from_lxml(e, file_path)
            self.logger.error(f"{error} {error.errors}")
            raise error from e
        except (OSError, ValueError) as e:
            raise XmlParsingError(f"Error loading XML file {file_path}: {e}", {'file_path': file_path}) from e

        root = tree.getroot()
        self.logger.info(f"Loaded XML configuration from {file_path}, root element: <{root.tag}>")
        return root

    def load_string(self, xml_string):
        """ Parse XML held in memory. Used by tests and diagnostics. """
        if isinstance(xml_string, str):
            xml_string = xml_string.encode('utf-8')
        if not xml_string.strip():
            raise XmlEmptyFileError("XML document is empty")
        try:
            return etree.fromstring(xml_string, self.parser)
        except etree.XMLSyntaxError as e:
            raise XmlSyntaxError.from_lxml(e, '<string>') from e

    def validate_file(self, file_path):
        if not file_path or not os.path.exists(file_path):
            raise XmlFileNotFoundError(f"XML file does not exist: {file_path}", {'file_path': file_path})

        if not os.path.isfile(file_path):
            raise XmlNotAFileError(f"Path is not a file: {file_path}", {'file_path': file_path})

        if not os.access(file_path, os.R_OK):
            raise XmlFileNotReadableError(f"XML file is not readable: {file_path}", {'file_path': file_path})

        if os.path.getsize(file_path) == 0:
            raise XmlEmptyFileError(f"XML file is empty: {file_path}", {'file_path': file_path})
