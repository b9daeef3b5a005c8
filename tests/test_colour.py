"""Tests for palette_tool.core.colour — sRGB/Lab conversion, ΔE76, CIEDE2000, hex formatting."""

import numpy as np
import pytest

from palette_tool.core.colour import (
    delta_e76,
    delta_e76_matrix,
    delta_e2000,
    lab_to_rgb,
    rgb_to_hex,
    rgb_to_lab,
    rgb_to_linear,
)


class TestRgbToLab:
    def test_white(self):
        L, a, b = rgb_to_lab((255, 255, 255))
        assert L == pytest.approx(100.0, abs=1e-3)
        assert a == pytest.approx(0.0, abs=1e-2)
        assert b == pytest.approx(0.0, abs=1e-2)

    def test_black(self):
        assert rgb_to_lab((0, 0, 0)) == pytest.approx([0.0, 0.0, 0.0], abs=1e-9)

    def test_red(self):
        assert rgb_to_lab((255, 0, 0)) == pytest.approx([53.24, 80.09, 67.20], abs=0.02)

    def test_blue(self):
        assert rgb_to_lab((0, 0, 255)) == pytest.approx([32.30, 79.19, -107.86], abs=0.02)

    def test_mid_grey_is_neutral(self):
        L, a, b = rgb_to_lab((128, 128, 128))
        assert L == pytest.approx(53.59, abs=0.02)
        assert abs(a) < 0.01
        assert abs(b) < 0.01

    def test_shape_preserved(self):
        arr = np.zeros((4, 5, 3), dtype=np.uint8)
        assert rgb_to_lab(arr).shape == (4, 5, 3)

    def test_linear_segment(self):
        # 10/255 is below the 0.04045 knee
        c = 10 / 255
        assert rgb_to_linear(np.array(c)) == pytest.approx(c / 12.92)


class TestLabRoundTrip:
    def test_primaries_and_neutrals(self):
        colours = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (128, 128, 128), (0, 0, 0), (255, 255, 255)]
        back = lab_to_rgb(rgb_to_lab(np.array(colours)))
        assert back.tolist() == [list(c) for c in colours]

    def test_random_colours_within_half_a_step(self):
        rgb = np.random.default_rng(3).integers(0, 256, size=(500, 3))
        back = lab_to_rgb(rgb_to_lab(rgb))
        assert np.all(np.abs(back - rgb) < 0.5)


class TestDeltaE76:
    def test_same_colour(self):
        lab = rgb_to_lab((12, 200, 99))
        assert delta_e76(lab, lab) == 0.0

    def test_known_distance(self):
        assert delta_e76((50, 0, 0), (53, 4, 0)) == pytest.approx(5.0)

    def test_broadcasts(self):
        d = delta_e76(np.array([[0, 0, 0], [3, 4, 0]]), (0, 0, 0))
        assert d.tolist() == pytest.approx([0.0, 5.0])

    def test_matrix(self):
        points = np.array([[0.0, 0, 0], [10, 0, 0]])
        centroids = np.array([[0.0, 0, 0], [0, 0, 10], [10, 0, 0]])
        table = delta_e76_matrix(points, centroids)
        assert table.shape == (2, 3)
        assert table[1, 2] == 0.0
        assert table[0, 1] == pytest.approx(10.0)


class TestDeltaE2000:
    # Reference pairs from Sharma, Wu & Dalal (2005)
    @pytest.mark.parametrize(
        'lab1, lab2, expected',
        [
            ((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485), 2.0425),
            ((50.0, -1.3802, -84.2814), (50.0, 0.0, -82.7485), 1.0000),
            ((50.0, 0.0, 0.0), (50.0, -1.0, 2.0), 2.3669),
            ((50.0, 2.5, 0.0), (73.0, 25.0, -18.0), 27.1492),
            ((50.0, 2.5, 0.0), (56.0, -27.0, -3.0), 31.9030),
            ((50.0, 2.5, 0.0), (50.0, 3.1736, 0.5854), 1.0000),
            ((60.2574, -34.0099, 36.2677), (60.4626, -34.1751, 39.4387), 1.2644),
            ((2.0776, 0.0795, -1.1350), (0.9033, -0.0636, -0.5514), 0.9082),
        ],
    )
    def test_reference_pairs(self, lab1, lab2, expected):
        assert delta_e2000(lab1, lab2) == pytest.approx(expected, abs=1e-4)

    def test_identity(self):
        for rgb in [(0, 0, 0), (255, 255, 255), (255, 0, 0), (17, 99, 201)]:
            lab = rgb_to_lab(rgb)
            assert delta_e2000(lab, lab) == 0.0

    def test_symmetry(self):
        labs = rgb_to_lab(np.random.default_rng(11).integers(0, 256, size=(200, 3)))
        forward = delta_e2000(labs[:100], labs[100:])
        backward = delta_e2000(labs[100:], labs[:100])
        assert forward == pytest.approx(backward, abs=1e-9)

    def test_returns_float_for_pair(self):
        assert isinstance(delta_e2000((50, 0, 0), (60, 0, 0)), float)

    def test_vector_against_single(self):
        labs = np.array([[50.0, 2.6772, -79.7751], [50.0, -1.3802, -84.2814]])
        d = delta_e2000(labs, (50.0, 0.0, -82.7485))
        assert d.tolist() == pytest.approx([2.0425, 1.0], abs=1e-4)


class TestHex:
    def test_uppercase(self):
        assert rgb_to_hex((171, 205, 239)) == '#ABCDEF'

    def test_zero_padded(self):
        assert rgb_to_hex((0, 10, 255)) == '#000AFF'

    def test_clamps(self):
        assert rgb_to_hex((300, -4, 0)) == '#FF0000'
