"""
Tests for the report CLI.
"""

import gzip
import json
import sys

import pytest
from loguru import logger

from traceprof.cli import _shrink, main
from tests.fixtures.captures import LOC_MAIN, LOC_RENDER, N, basic_capture, legacy_thread, make_capture


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def capture_path(tmp_path):
    path = tmp_path / 'basic.json'
    path.write_text(json.dumps(basic_capture()))
    return path


class TestShrink:

    def test_short_unchanged(self):
        assert _shrink('abc', 10) == 'abc'

    def test_keeps_both_ends(self):
        result = _shrink('abcdefghijklmnop', 9)
        assert result == 'abc...nop'
        assert len(result) == 9


class TestMain:

    def test_counter_table(self, capture_path, capsys):
        assert main([str(capture_path)]) == 0
        lines = capsys.readouterr().out.splitlines()

        assert lines[0] == f"Profile: {capture_path}"
        assert lines[1] == 'Thread: 0 (GeckoMain)'
        assert lines[2].startswith('Function')
        assert lines[3].startswith('render:42')
        assert lines[3].split()[1:] == ['3', '0', '1', '0']

    def test_flat_profile(self, capture_path, capsys):
        assert main([str(capture_path), '--functions']) == 0
        out = capsys.readouterr().out

        assert '%INC' in out
        assert '87.50' in out
        assert LOC_MAIN in out

    def test_optimization_sites(self, tmp_path, capsys):
        render = (LOC_RENDER, 'ion', {'optsIndex': 0})
        sites = [{'line': 42, 'attempts': [{'strategy': 'GetProp_InlineAccess', 'outcome': 'Inlined'}]}]
        path = tmp_path / 'opts.json'
        path.write_text(json.dumps(make_capture(legacy_thread([(0.0, [N, render])], optimizations=sites))))

        assert main([str(path), '--optimizations']) == 0
        out = capsys.readouterr().out

        assert 'File: http://example.com/app.js' in out
        assert '<' in out
        assert 'GetProp_InlineAccess -> Inlined' in out

    def test_bad_capture_keeps_going(self, tmp_path, capture_path, capsys):
        bad = tmp_path / 'bad.json'
        bad.write_text('not json')

        assert main([str(bad), str(capture_path)]) == 1
        captured = capsys.readouterr()
        assert 'error:' in captured.err
        assert f"Profile: {capture_path}" in captured.out
        assert 'Thread: 0 (GeckoMain)' in captured.out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / 'absent.json')]) == 1

    def test_settings_file(self, tmp_path, capture_path, capsys):
        settings = tmp_path / 'settings.yaml'
        settings.write_text('include_platform_frames: false\n')

        assert main([str(capture_path), '--functions', '--settings', str(settings)]) == 0
        out = capsys.readouterr().out
        assert 'js::RunScript' not in out.split('%INC', 1)[1]

    def test_bad_settings(self, tmp_path, capture_path, capsys):
        settings = tmp_path / 'settings.yaml'
        settings.write_text('- not a mapping\n')

        assert main([str(capture_path), '--settings', str(settings)]) == 2
        assert 'error:' in capsys.readouterr().err

    def test_malformed_settings(self, tmp_path, capture_path, capsys):
        settings = tmp_path / 'settings.yaml'
        settings.write_text('tier_dominance: [0.5\n')

        assert main([str(capture_path), '--settings', str(settings)]) == 2
        assert 'invalid YAML' in capsys.readouterr().err

    def test_truncated_gzip(self, tmp_path, capture_path, capsys):
        bad = tmp_path / 'truncated.json.gz'
        bad.write_bytes(gzip.compress(json.dumps(basic_capture()).encode('utf-8'))[:-12])

        assert main([str(bad), str(capture_path)]) == 1
        captured = capsys.readouterr()
        assert 'error:' in captured.err
        assert 'Thread: 0 (GeckoMain)' in captured.out

    def test_invalid_utf8(self, tmp_path, capsys):
        bad = tmp_path / 'latin1.json'
        bad.write_bytes(b'{"meta": "caf\xe9"}')

        assert main([str(bad)]) == 1
        assert 'error:' in capsys.readouterr().err
