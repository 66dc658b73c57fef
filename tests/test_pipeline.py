"""Tests for ntscj_tool.core.pipeline — whole-image gamut remapping."""

import numpy as np
import pytest
from ntscj_tool.core.gamut import Direction
from ntscj_tool.core.pipeline import _bands, convert_file, transform_buffer, transform_image
from ntscj_tool.core.types import PixelBuffer
from PIL import Image

DITHERS = ['ordered', 'error-diffusion', 'quasirandom']
DIRECTIONS = ['ntscj-to-srgb', 'srgb-to-ntscj']


def _random_rgba(width: int, height: int, seed: int = 1) -> bytearray:
    rng = np.random.default_rng(seed)
    return bytearray(rng.integers(0, 256, size=width * height * 4, dtype=np.uint8).tobytes())


def _flat_rgba(width: int, height: int, rgba: tuple[int, int, int, int]) -> bytearray:
    return bytearray(bytes(rgba) * (width * height))


def _pixels(buf, width: int, height: int) -> np.ndarray:
    return np.frombuffer(bytes(buf), dtype=np.uint8).reshape(height, width, 4)


class TestAlphaInvariance:
    @pytest.mark.parametrize('dither', DITHERS)
    @pytest.mark.parametrize('direction', DIRECTIONS)
    def test_alpha_untouched(self, dither, direction):
        buf = _random_rgba(17, 9)
        alpha_before = _pixels(buf, 17, 9)[..., 3].copy()
        transform_image(buf, 17, 9, direction, dither=dither)
        np.testing.assert_array_equal(_pixels(buf, 17, 9)[..., 3], alpha_before)


class TestInPlace:
    def test_modifies_bytearray(self):
        buf = _flat_rgba(4, 4, (200, 40, 40, 255))
        original = bytes(buf)
        transform_image(buf, 4, 4, Direction.NTSCJ_TO_SRGB)
        assert len(buf) == len(original)
        assert bytes(buf) != original

    def test_numpy_buffer(self):
        arr = np.full((4, 5, 4), 180, dtype=np.uint8)
        arr[..., 0] = 250
        transform_image(arr, 5, 4, 'ntscj-to-srgb')
        assert arr.shape == (4, 5, 4)
        assert (arr[..., 3] == 180).all()
        assert (arr[..., 0] == 255).all()

    def test_pixel_buffer(self):
        buffer = PixelBuffer(width=3, height=2, data=_flat_rgba(3, 2, (0, 255, 0, 128)))
        transform_buffer(buffer, 'srgb-to-ntscj', dither='ordered')
        arr = buffer.as_array()
        assert (arr[..., 1] == 255).all()
        assert (arr[..., 3] == 128).all()


class TestClampBoundary:
    @pytest.mark.parametrize('dither', DITHERS)
    def test_saturated_red_ntscj_to_srgb(self, dither):
        """Red overshoots to 1.35 and its neighbours go negative: exactly 255 and 0 after clamping."""
        buf = _flat_rgba(9, 9, (255, 0, 0, 255))
        transform_image(buf, 9, 9, 'ntscj-to-srgb', dither=dither)
        px = _pixels(buf, 9, 9)
        assert (px[..., 0] == 255).all()
        assert (px[..., 1] == 0).all()
        assert (px[..., 2] == 0).all()

    @pytest.mark.parametrize('dither', DITHERS)
    def test_saturated_green_srgb_to_ntscj(self, dither):
        buf = _flat_rgba(9, 9, (0, 255, 0, 255))
        transform_image(buf, 9, 9, 'srgb-to-ntscj', dither=dither)
        assert (_pixels(buf, 9, 9)[..., 1] == 255).all()

    @pytest.mark.parametrize('dither', DITHERS)
    @pytest.mark.parametrize('direction', DIRECTIONS)
    def test_black_stays_black(self, dither, direction):
        buf = _flat_rgba(9, 9, (0, 0, 0, 0))
        transform_image(buf, 9, 9, direction, dither=dither)
        assert bytes(buf) == bytes(9 * 9 * 4)


class TestGrey:
    @pytest.mark.parametrize('dither', DITHERS)
    @pytest.mark.parametrize('direction', DIRECTIONS)
    @pytest.mark.parametrize('level', [16, 64, 128, 200, 240])
    def test_near_identity(self, dither, direction, level):
        buf = _flat_rgba(16, 16, (level, level, level, 255))
        transform_image(buf, 16, 16, direction, dither=dither)
        rgb = _pixels(buf, 16, 16)[..., :3].astype(int)
        assert np.abs(rgb - level).max() <= 1
        assert abs(rgb.mean() - level) <= 1

    @pytest.mark.parametrize('dither', DITHERS)
    def test_white_maps_to_white(self, dither):
        buf = _flat_rgba(8, 8, (255, 255, 255, 255))
        transform_image(buf, 8, 8, 'ntscj-to-srgb', dither=dither)
        assert _pixels(buf, 8, 8)[..., :3].min() >= 254


class TestDeterminism:
    @pytest.mark.parametrize('dither', DITHERS)
    def test_repeat_runs_identical(self, dither):
        a = _random_rgba(12, 10, seed=4)
        b = bytearray(a)
        transform_image(a, 12, 10, 'ntscj-to-srgb', dither=dither)
        transform_image(b, 12, 10, 'ntscj-to-srgb', dither=dither)
        assert a == b

    def test_dithers_differ(self):
        outputs = []
        for dither in DITHERS:
            buf = _random_rgba(16, 16, seed=6)
            transform_image(buf, 16, 16, 'ntscj-to-srgb', dither=dither)
            outputs.append(bytes(buf))
        assert len(set(outputs)) == 3


class TestWorkers:
    def test_bands_cover_rows(self):
        assert _bands(10, 3) == [(0, 4), (4, 8), (8, 10)]
        assert _bands(2, 8) == [(0, 1), (1, 2)]
        assert _bands(5, 1) == [(0, 5)]

    @pytest.mark.parametrize('dither', DITHERS)
    @pytest.mark.parametrize('workers', [2, 3, 7])
    def test_parallel_matches_serial(self, dither, workers):
        serial = _random_rgba(13, 11, seed=8)
        parallel = bytearray(serial)
        transform_image(serial, 13, 11, 'srgb-to-ntscj', dither=dither)
        transform_image(parallel, 13, 11, 'srgb-to-ntscj', dither=dither, workers=workers)
        assert serial == parallel


class TestRoundTrip:
    def test_low_saturation_round_trip_bounded(self):
        """sRGB -> NTSC-J -> sRGB is lossy (independently fitted matrices), but only slightly."""
        rng = np.random.default_rng(11)
        width, height = 32, 32
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[..., :3] = rng.integers(102, 154, size=(height, width, 3))
        arr[..., 3] = 255
        original = arr.copy()

        transform_image(arr, width, height, 'srgb-to-ntscj')
        transform_image(arr, width, height, 'ntscj-to-srgb')

        diff = np.abs(arr[..., :3].astype(int) - original[..., :3].astype(int))
        assert diff.max() <= 4
        assert diff.mean() < 1.5

    def test_directions_move_colours_opposite_ways(self):
        colour = (180, 90, 60, 255)
        to_srgb = _flat_rgba(1, 1, colour)
        to_ntscj = _flat_rgba(1, 1, colour)
        transform_image(to_srgb, 1, 1, 'ntscj-to-srgb', dither='error-diffusion')
        transform_image(to_ntscj, 1, 1, 'srgb-to-ntscj', dither='error-diffusion')
        # NTSC-J red is more saturated than sRGB red
        assert to_srgb[0] > colour[0] > to_ntscj[0]


class TestValidation:
    def test_wrong_length(self):
        with pytest.raises(ValueError, match='expected 64'):
            transform_image(bytearray(63), 4, 4, 'ntscj-to-srgb')

    def test_negative_dimensions(self):
        with pytest.raises(ValueError, match='Invalid dimensions'):
            transform_image(bytearray(0), -1, 4, 'ntscj-to-srgb')

    def test_read_only_buffer(self):
        with pytest.raises(TypeError, match='read-only'):
            transform_image(bytes(16), 2, 2, 'ntscj-to-srgb')

    def test_unknown_dither_leaves_buffer_alone(self):
        buf = _random_rgba(4, 4)
        before = bytes(buf)
        with pytest.raises(KeyError):
            transform_image(buf, 4, 4, 'ntscj-to-srgb', dither='atkinson')
        assert bytes(buf) == before

    def test_unknown_curve(self):
        with pytest.raises(KeyError):
            transform_image(_random_rgba(2, 2), 2, 2, 'ntscj-to-srgb', curve='rec709')

    def test_unknown_direction(self):
        with pytest.raises(ValueError, match='Unknown mode'):
            transform_image(_random_rgba(2, 2), 2, 2, 'pal-to-srgb')

    def test_empty_image_is_noop(self):
        buf = bytearray()
        transform_image(buf, 0, 7, 'ntscj-to-srgb')
        assert buf == bytearray()


class TestCurves:
    def test_power_curve_differs_near_black(self):
        srgb = _flat_rgba(8, 8, (20, 8, 6, 255))
        power = bytearray(srgb)
        transform_image(srgb, 8, 8, 'ntscj-to-srgb', dither='error-diffusion')
        transform_image(power, 8, 8, 'ntscj-to-srgb', dither='error-diffusion', curve='power')
        assert srgb != power


class TestConvertFile:
    def test_writes_output_and_reports(self, tmp_path):
        src = tmp_path / 'in.png'
        dst = tmp_path / 'out.png'
        arr = np.zeros((6, 10, 4), dtype=np.uint8)
        arr[..., 0] = 200
        arr[..., 1] = 60
        arr[..., 2] = 30
        arr[..., 3] = np.arange(10, dtype=np.uint8) * 25
        Image.fromarray(arr).save(src)

        report = convert_file(str(src), str(dst), 'ntscj-to-srgb', dither='ordered')

        assert dst.exists()
        out = np.array(Image.open(dst))
        assert out.shape == (6, 10, 4)
        np.testing.assert_array_equal(out[..., 3], arr[..., 3])
        assert report.width == 10
        assert report.height == 6
        assert report.direction == 'ntscj-to-srgb'
        assert report.dither == 'ordered'
        assert report.changed_pixels == 60
        assert report.mean_delta[0] > 0

    def test_output_not_created_on_bad_input(self, tmp_path):
        from ntscj_tool.core.codec import CodecError

        dst = tmp_path / 'out.png'
        with pytest.raises(CodecError):
            convert_file(str(tmp_path / 'missing.png'), str(dst), 'ntscj-to-srgb')
        assert not dst.exists()

    def test_failed_save_keeps_existing_output(self, tmp_path):
        from ntscj_tool.core.codec import CodecError

        src = tmp_path / 'in.png'
        Image.new('RGBA', (3, 3), (200, 60, 30, 255)).save(src)
        dst = tmp_path / 'out.jpg'
        dst.write_bytes(b'earlier result')
        with pytest.raises(CodecError):
            convert_file(str(src), str(dst), 'ntscj-to-srgb')
        assert dst.read_bytes() == b'earlier result'
        assert sorted(p.name for p in tmp_path.iterdir()) == ['in.png', 'out.jpg']
