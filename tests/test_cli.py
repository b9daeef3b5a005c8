"""Tests for the palette-tool CLI, technique registry and report formatting."""

import json
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from palette_tool import registry
from palette_tool.__main__ import main
from palette_tool.core.errors import EmptyInput
from palette_tool.core.report import format_json, format_text
from palette_tool.core.types import Report

ENV_VARS = (
    'PALETTE_SEED',
    'PALETTE_MAX_SIDE',
    'PALETTE_QUANT_STEP',
    'PALETTE_MERGE_DELTA',
    'PALETTE_MIN_PERCENT',
    'PALETTE_MAX_ITERATIONS',
)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / '.git').mkdir()
    monkeypatch.chdir(tmp_path)
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def quadrants(workdir: Path) -> Path:
    arr = np.zeros((100, 100, 3), dtype=np.uint8)
    arr[:50, :50] = (255, 0, 0)
    arr[:50, 50:] = (0, 255, 0)
    arr[50:, :50] = (0, 0, 255)
    arr[50:, 50:] = (255, 255, 0)
    path = workdir / 'quad.png'
    Image.fromarray(arr).save(path)
    return path


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> None:
    monkeypatch.setattr(sys, 'argv', ['palette-tool', *argv])
    main()


class TestRegistry:
    def test_discovers_all_techniques(self):
        assert set(registry.all_techniques()) == {'all', 'background', 'extract', 'sample', 'swatch'}

    def test_found_from_package_files(self):
        assert sorted(registry._module_names()) == ['all', 'background', 'extract', 'sample', 'swatch']

    def test_unknown(self):
        with pytest.raises(KeyError, match='Unknown technique'):
            registry.get('nope')


class TestMain:
    def test_extract_json(self, monkeypatch, capsys, quadrants: Path):
        _run(monkeypatch, 'extract', 'tmp', str(quadrants), '--json', '--seed', '1')
        out = json.loads(capsys.readouterr().out)
        palette = out['techniques']['extract']['palette']
        assert {p['hex'] for p in palette} == {'#FF0000', '#00FF00', '#0000FF', '#FFFF00'}
        assert all(p['pct'] == 25.0 for p in palette)
        assert out['dimensions'] == {'width': 100, 'height': 100}
        assert out['errors'] == []

    def test_extract_text(self, monkeypatch, capsys, quadrants: Path):
        _run(monkeypatch, 'extract', 'tmp', str(quadrants), '-s', '1')
        out = capsys.readouterr().out
        assert '── extract' in out
        assert 'rgb(255, 0, 0)' in out
        assert '25.0%' in out

    def test_all_runs_reporting_techniques(self, monkeypatch, capsys, quadrants: Path):
        _run(monkeypatch, 'all', 'tmp', str(quadrants), '--json', '--seed', '1')
        out = json.loads(capsys.readouterr().out)
        assert set(out['techniques']) == {'background', 'extract', 'sample'}
        assert out['techniques']['background']['detected'] is False
        assert out['techniques']['sample']['stride'] == 2

    def test_swatch_writes_png(self, monkeypatch, capsys, quadrants: Path, workdir: Path):
        _run(monkeypatch, 'swatch', str(workdir / 'out'), str(quadrants), '--seed', '1')
        swatch = workdir / 'out' / 'quad_palette.png'
        assert swatch.exists()
        with Image.open(swatch) as img:
            assert img.size == (600, 120)
            assert len(img.getcolors()) == 4

    def test_max_side_downscales(self, monkeypatch, capsys, quadrants: Path):
        _run(monkeypatch, 'sample', 'tmp', str(quadrants), '--json', '--max-side', '50')
        out = json.loads(capsys.readouterr().out)
        assert out['dimensions'] == {'width': 50, 'height': 50}
        assert out['original_dimensions'] == {'width': 100, 'height': 100}

    def test_missing_image(self, monkeypatch, capsys, workdir: Path):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'extract', 'tmp', str(workdir / 'missing.png'))
        assert exc.value.code == 1
        assert 'image not found' in capsys.readouterr().err

    def test_undecodable_image(self, monkeypatch, capsys, workdir: Path):
        bad = workdir / 'bad.png'
        bad.write_text('not an image')
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'extract', 'tmp', str(bad))
        assert exc.value.code == 1
        assert 'Failed to load image' in capsys.readouterr().err

    def test_oversized_image(self, monkeypatch, capsys, quadrants: Path):
        monkeypatch.setattr(Image, 'MAX_IMAGE_PIXELS', 1000)
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'extract', 'tmp', str(quadrants))
        assert exc.value.code == 1
        assert 'Error: Failed to load image' in capsys.readouterr().err

    def test_extraction_failure_exits_nonzero(self, monkeypatch, capsys, workdir: Path):
        path = workdir / 'white.png'
        Image.new('RGB', (20, 20), (255, 255, 255)).save(path)
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'extract', 'tmp', str(path), '--json')
        assert exc.value.code == 1
        captured = capsys.readouterr()
        out = json.loads(captured.out)
        assert out['techniques']['extract']['kind'] == 'empty_input'
        assert out['errors'][0]['technique'] == 'extract'

    def test_bad_env_value(self, monkeypatch, capsys, quadrants: Path):
        monkeypatch.setenv('PALETTE_QUANT_STEP', 'eight')
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'extract', 'tmp', str(quadrants))
        assert exc.value.code == 1
        assert 'PALETTE_QUANT_STEP' in capsys.readouterr().err

    def test_env_file_seed(self, monkeypatch, capsys, quadrants: Path, workdir: Path):
        # setenv first so teardown removes whatever load_env writes
        monkeypatch.setenv('PALETTE_SEED', '')
        monkeypatch.delenv('PALETTE_SEED')
        (workdir / '.env').write_text('PALETTE_SEED=3\n')
        _run(monkeypatch, 'extract', 'tmp', str(quadrants), '--json')
        captured = capsys.readouterr()
        assert 'loaded' in captured.err
        assert len(json.loads(captured.out)['techniques']['extract']['palette']) == 4


class TestHelp:
    def test_lists_techniques(self, monkeypatch, capsys, workdir: Path):
        _run(monkeypatch, 'help')
        out = capsys.readouterr().out
        for name in ('all', 'background', 'extract', 'sample', 'swatch'):
            assert name in out

    def test_technique_docs(self, monkeypatch, capsys, workdir: Path):
        _run(monkeypatch, 'help', 'extract')
        assert 'k-means' in capsys.readouterr().out

    def test_unknown_technique(self, monkeypatch, capsys, workdir: Path):
        with pytest.raises(SystemExit):
            _run(monkeypatch, 'help', 'bogus')
        assert 'Unknown technique' in capsys.readouterr().err

    def test_no_technique(self, monkeypatch, capsys, workdir: Path):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch)
        assert exc.value.code == 1


class TestReportFormatting:
    def test_text_header_and_failure(self):
        report = Report(image_path='a.png', image_width=600, image_height=300, original_size=(1200, 600))
        report.add('extract', {'error': 'No valid colours found in image', 'kind': 'empty_input'})
        report.record_error('extract', EmptyInput())
        text = format_text(report)
        assert 'a.png (600×300)' in text
        assert 'downscaled from 1200×600' in text
        assert 'error: No valid colours found in image' in text
        assert 'FAIL 1 technique(s)' in text
        assert report.failed

    def test_text_background(self):
        report = Report(image_path='a.png', image_width=10, image_height=10, original_size=(10, 10))
        report.add('background', {'detected': True, 'border_pixels': 36, 'rgb': [1, 2, 3], 'hex': '#010203'})
        text = format_text(report)
        assert 'background: #010203 (36 border pixels)' in text
        assert 'downscaled' not in text

    def test_text_generic_fallback(self):
        report = Report(image_path='a.png', image_width=1, image_height=1)
        report.add('custom', {'value': 5})
        assert 'custom.value: 5' in format_text(report)

    def test_json(self):
        report = Report(image_path='a.png', image_width=4, image_height=2)
        report.add('sample', {'stride': 2, 'visited': 2, 'kept': 2, 'unique': 1})
        obj = json.loads(format_json(report))
        assert obj['image'] == 'a.png'
        assert 'original_dimensions' not in obj
        assert obj['techniques']['sample']['unique'] == 1
