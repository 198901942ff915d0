"""Tests for loading Panorama exports and the element helpers."""
import os

import pytest
from lxml import etree

from parse import (
    PanoramaXmlLoader,
    XmlEmptyFileError,
    XmlFileNotFoundError,
    XmlFileNotReadableError,
    XmlNotAFileError,
    XmlParsingError,
    XmlSyntaxError,
)
from parse import xml_helper as xh


def test_load_returns_root(loader, sample_file):
    root = loader.load(str(sample_file))
    assert root.tag == 'config'
    assert root.get('version') == '10.2.0'


def test_missing_file(loader, tmp_path):
    with pytest.raises(XmlFileNotFoundError):
        loader.load(str(tmp_path / 'missing.xml'))


def test_directory_is_not_a_file(loader, tmp_path):
    with pytest.raises(XmlNotAFileError):
        loader.load(str(tmp_path))


def test_empty_file(loader, tmp_path):
    path = tmp_path / 'empty.xml'
    path.write_text('')
    with pytest.raises(XmlEmptyFileError):
        loader.load(str(path))


@pytest.mark.skipif(not hasattr(os, 'geteuid') or os.geteuid() == 0, reason="root can read any file")
def test_unreadable_file(loader, tmp_path):
    path = tmp_path / 'secret.xml'
    path.write_text('<config/>')
    path.chmod(0)
    try:
        with pytest.raises(XmlFileNotReadableError):
            loader.load(str(path))
    finally:
        path.chmod(0o644)


def test_malformed_xml_reports_location(loader, tmp_path):
    path = tmp_path / 'broken.xml'
    path.write_text('<config>\n  <shared>\n</config>\n')

    with pytest.raises(XmlSyntaxError) as excinfo:
        loader.load(str(path))

    error = excinfo.value
    assert isinstance(error, XmlParsingError)
    assert error.line is not None
    assert error.errors
    assert error.context['file_path'] == str(path)
    assert str(path) in str(error)


def test_load_string(loader):
    assert loader.load_string('<config><shared/></config>').find('shared') is not None

    with pytest.raises(XmlEmptyFileError):
        loader.load_string('   ')
    with pytest.raises(XmlSyntaxError):
        loader.load_string('<config>')


def test_entities_are_not_resolved(loader):
    root = loader.load_string('<!DOCTYPE c [<!ENTITY e "expanded">]><c>&e;</c>')
    assert 'expanded' not in (root.text or '')


@pytest.fixture
def element():
    return etree.fromstring("""
        <entry name=" rule-1 ">
          <!-- comment -->
          <description>  some text  </description>
          <empty>   </empty>
          <from><member>trust</member><member name="dmz"/><member>  </member></from>
          <devices><entry name="fw1"/><entry/><entry name="fw2"/></devices>
        </entry>
    """)


def test_get_attribute(element):
    assert xh.get_attribute(element, 'name') == 'rule-1'
    assert xh.get_attribute(element, 'missing', 'fallback') == 'fallback'
    assert xh.get_attribute(None, 'name') == ''


def test_text_helpers(element):
    assert xh.find_text(element, 'description') == 'some text'
    assert xh.find_text(element, 'empty', 'default') == 'default'
    assert xh.find_text(element, 'missing', 'default') == 'default'
    assert xh.find_text(None, 'description') == ''


def test_get_members_handles_text_and_name_forms(element):
    assert xh.get_members(element, 'from') == ['trust', 'dmz']
    assert xh.get_members(element.find('from')) == ['trust', 'dmz']
    assert xh.get_members(element, 'to') == []
    assert xh.get_members(None, 'from') == []


def test_entry_names_and_children(element):
    assert xh.get_entry_names(element, 'devices/entry') == ['fw1', 'fw2']
    assert [child.tag for child in xh.children(element)] == ['description', 'empty', 'from', 'devices']
    assert xh.children(None) == []
    assert xh.find_all(None, 'entry') == []
    assert xh.find(None, 'entry') is None


@pytest.mark.parametrize('value, expected', [
    ('yes', True), ('YES', True), ('true', True), ('1', True), (' yes ', True),
    ('no', False), ('false', False), ('0', False), ('', False),
    ('maybe', False), (None, False), (1, False),
])
def test_to_bool(value, expected):
    assert xh.to_bool(value) is expected


def test_to_bool_default():
    assert xh.to_bool('maybe', default=True) is True
    assert xh.to_bool(None, default=True) is True
