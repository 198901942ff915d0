"""Tests for the command line entry points."""
import datetime
import json

import pytest
import yaml

import diagnose
import main


@pytest.fixture
def run_main(tmp_path, config_file):
    log_file = tmp_path / 'debug-log.txt'

    def run(*args):
        return main.main(['--config', str(config_file), '--log-file', str(log_file), *args])
    return run


def read_documents(path):
    with open(path, encoding='utf-8') as stream:
        return [json.loads(line) for line in stream]


def test_successful_run(run_main, sample_file, tmp_path):
    out = tmp_path / 'out' / 'nested' / 'rules.ndjson'

    code = run_main('--file', str(sample_file), '--tenant', 'acme', '--date', '2024-01-15', '--out', str(out))

    assert code == main.EXIT_SUCCESS
    documents = read_documents(out)
    assert len(documents) == 4
    assert {doc['panorama_tenant'] for doc in documents} == {'acme'}
    assert {doc['snapshot_date'] for doc in documents} == {'2024-01-15'}
    assert documents[1]['expanded']['services'] == ['application-default']


def test_defaults_come_from_config_and_today(run_main, sample_file, tmp_path):
    out = tmp_path / 'rules.ndjson'

    assert run_main('--file', str(sample_file), '--out', str(out)) == main.EXIT_SUCCESS

    document = read_documents(out)[0]
    assert document['panorama_tenant'] == 'fixture-tenant'
    assert document['snapshot_date'] == datetime.date.today().strftime('%Y-%m-%d')


def test_run_is_logged(run_main, sample_file, tmp_path):
    run_main('--file', str(sample_file), '--out', str(tmp_path / 'rules.ndjson'))

    log = (tmp_path / 'debug-log.txt').read_text()
    assert 'Ingestion Run Start' in log
    assert 'Rules processed: 4' in log
    assert "references missing parent 'Missing'" in log


def test_missing_file_argument(run_main):
    assert run_main() == main.EXIT_INVALID_PARAMETERS


def test_nonexistent_file(run_main, tmp_path):
    assert run_main('--file', str(tmp_path / 'nope.xml')) == main.EXIT_INVALID_PARAMETERS


@pytest.mark.parametrize('date', ['2024-13-01', '2024-1-5', '15-01-2024', 'yesterday', '2024-02-30'])
def test_invalid_date(run_main, sample_file, date):
    assert run_main('--file', str(sample_file), '--date', date) == main.EXIT_INVALID_PARAMETERS


def test_malformed_xml(run_main, tmp_path):
    path = tmp_path / 'broken.xml'
    path.write_text('<config><shared></config>')
    out = tmp_path / 'rules.ndjson'

    assert run_main('--file', str(path), '--out', str(out)) == main.EXIT_XML_ERROR
    assert not out.exists()


def test_empty_xml(run_main, tmp_path):
    path = tmp_path / 'empty.xml'
    path.write_text('')
    assert run_main('--file', str(path), '--out', str(tmp_path / 'rules.ndjson')) == main.EXIT_XML_ERROR


def test_unexpected_error(run_main, sample_file, tmp_path, monkeypatch):
    def broken(parameters, config):
        raise RuntimeError('boom')

    monkeypatch.setattr(main, 'run', broken)
    assert run_main('--file', str(sample_file), '--out', str(tmp_path / 'rules.ndjson')) == main.EXIT_UNEXPECTED


def test_invalid_config(tmp_path, sample_file):
    config = tmp_path / 'bad.yml'
    config.write_text('tenant: [unclosed\n')
    assert main.main(['--config', str(config), '--file', str(sample_file)]) == main.EXIT_INVALID_PARAMETERS


def test_write_config(tmp_path, capsys):
    path = tmp_path / 'settings.yml'

    assert main.main(['--write-config', '--config', str(path)]) == main.EXIT_SUCCESS
    assert yaml.safe_load(path.read_text())['tenant'] == 'default'
    assert str(path) in capsys.readouterr().out


@pytest.mark.parametrize('value, expected', [
    ('2024-01-15', True),
    ('2024-02-29', True),
    ('2023-02-29', False),
    ('2024-01-15T00:00', False),
    (None, False),
])
def test_is_valid_date(value, expected):
    assert main.is_valid_date(value) is expected


def test_diagnose_report(sample_file, capsys):
    assert diagnose.main([str(sample_file)]) == 0

    out = capsys.readouterr().out
    assert 'Security pre-rules' in out
    assert 'Zone entries under devices' in out


def test_diagnose_find_name(sample_file, capsys):
    assert diagnose.main([str(sample_file), '--name', 'Child1']) == 0

    out = capsys.readouterr().out
    assert "Found 2 elements with name='Child1'" in out
    assert '/config/devices/entry/device-group/entry[2]' in out


def test_diagnose_line_lookup(sample_file):
    xpath, content = diagnose.get_xpath_and_line(str(sample_file), 3)

    assert xpath == '/config/shared'
    assert content == '<shared>'


def test_diagnose_bad_file(tmp_path, capsys):
    path = tmp_path / 'broken.xml'
    path.write_text('<config>')

    assert diagnose.main([str(path)]) == 1
    assert 'Failed to parse XML file' in capsys.readouterr().out


def test_count_patterns(sample_root):
    report = dict((description, (count, names)) for description, count, names in
                  diagnose.count_patterns(sample_root, diagnose.STRUCTURE_PATTERNS, examples=2))

    assert report['Security pre-rules'] == (4, ['allow web', 'app-default'])
    assert report['Nested device group entries'][0] == 6


def test_unwritable_log_file(config_file, sample_file, tmp_path, capsys):
    log_file = tmp_path / 'missing-dir' / 'debug-log.txt'

    code = main.main(['--config', str(config_file), '--log-file', str(log_file), '--file', str(sample_file)])

    assert code == main.EXIT_INVALID_PARAMETERS
    assert 'Cannot open log file' in capsys.readouterr().err
    assert not log_file.exists()
