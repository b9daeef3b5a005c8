"""Tests for palette_tool.core.config — defaults, validation, PALETTE_* overrides."""

import pytest

from palette_tool.core.config import ExtractionConfig


class TestDefaults:
    def test_pipeline_constants(self):
        c = ExtractionConfig()
        assert c.max_side == 600
        assert c.alpha_threshold == 160
        assert c.quant_step == 8
        assert (c.k_min, c.k_max) == (4, 16)
        assert c.merge_delta == 10.0
        assert c.min_percent == 1.5
        assert c.seed is None

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ExtractionConfig().seed = 3  # type: ignore[misc]


class TestValidation:
    @pytest.mark.parametrize(
        'kwargs',
        [{'quant_step': 0}, {'k_min': 0}, {'k_min': 8, 'k_max': 4}, {'max_side': 0}, {'max_iterations': 0}],
    )
    def test_rejects(self, kwargs):
        with pytest.raises(ValueError):
            ExtractionConfig(**kwargs)


class TestFromEnv:
    def test_reads_variables(self):
        env = {
            'PALETTE_SEED': '42',
            'PALETTE_MAX_SIDE': '300',
            'PALETTE_QUANT_STEP': '16',
            'PALETTE_MERGE_DELTA': '7.5',
            'PALETTE_MIN_PERCENT': '2',
            'PALETTE_MAX_ITERATIONS': '5',
        }
        c = ExtractionConfig.from_env(env)
        assert c.seed == 42
        assert c.max_side == 300
        assert c.quant_step == 16
        assert c.merge_delta == 7.5
        assert c.min_percent == 2.0
        assert c.max_iterations == 5

    def test_empty_and_unrelated_ignored(self):
        c = ExtractionConfig.from_env({'PALETTE_SEED': '  ', 'HOME': '/root'})
        assert c == ExtractionConfig()

    def test_overrides_win(self):
        c = ExtractionConfig.from_env({'PALETTE_SEED': '1'}, seed=9, max_side=None)
        assert c.seed == 9
        assert c.max_side == 600

    def test_bad_value_names_variable(self):
        with pytest.raises(ValueError, match='PALETTE_QUANT_STEP'):
            ExtractionConfig.from_env({'PALETTE_QUANT_STEP': 'eight'})

    def test_invalid_result_still_validated(self):
        with pytest.raises(ValueError):
            ExtractionConfig.from_env({'PALETTE_QUANT_STEP': '0'})

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv('PALETTE_MIN_PERCENT', '3.5')
        assert ExtractionConfig.from_env().min_percent == 3.5
