"""
Tests for the resize engine: mapping, both methods, both strategies.
"""
import numpy as np
import pytest

from image_resizer import (
    InvalidArgumentError,
    Parallel,
    PixelBuffer,
    ResizeMethod,
    Sequential,
    compare_images,
    map_coords,
    parse_backend,
    partition_rows,
    resize,
)
from image_resizer.processing import round_half_away

METHODS = [ResizeMethod.NEAREST, ResizeMethod.BILINEAR]


def test_map_coords_pixel_center():
    s = map_coords(2, 4)
    assert s.dtype == np.float32
    assert list(s) == [0.5, 2.5]
    assert list(map_coords(4, 2)) == [-0.25, 0.25, 0.75, 1.25]


def test_round_half_away_from_zero():
    x = np.array([0.5, 1.5, 2.5, -0.5, -0.25, 0.49, 2.0], dtype=np.float32)
    assert list(round_half_away(x)) == [1.0, 2.0, 3.0, -1.0, 0.0, 0.0, 2.0]


def test_method_parse():
    assert ResizeMethod.parse("Bilinear") is ResizeMethod.BILINEAR
    assert ResizeMethod.parse(ResizeMethod.NEAREST) is ResizeMethod.NEAREST
    with pytest.raises(InvalidArgumentError):
        ResizeMethod.parse("bicubic")


def test_parse_backend():
    assert isinstance(parse_backend("seq"), Sequential)
    par = parse_backend("PARALLEL", 4)
    assert isinstance(par, Parallel) and par.threads == 4
    with pytest.raises(InvalidArgumentError):
        parse_backend("gpu")
    with pytest.raises(InvalidArgumentError):
        Parallel(-1)


def test_partition_rows():
    assert partition_rows(10, 3) == [(0, 4), (4, 8), (8, 10)]
    assert partition_rows(2, 8) == [(0, 1), (1, 2)]
    assert partition_rows(5, 1) == [(0, 5)]
    with pytest.raises(InvalidArgumentError):
        partition_rows(0, 2)


def test_parallel_workers_bounded_by_rows():
    assert Parallel(8).workers(3) == 3
    assert Parallel(2).workers(100) == 2
    assert Parallel(0).workers(1) == 1
    assert Parallel(0).workers(10_000) >= 1


@pytest.mark.parametrize("method", METHODS)
@pytest.mark.parametrize("size", [(1, 1), (5, 3), (74, 46), (37, 23), (100, 7)])
def test_shape_invariant(rgb_image, method, size):
    out = resize(rgb_image, size[0], size[1], method)
    assert out.shape == (size[0], size[1], rgb_image.channels)


def test_nearest_4x4_to_2x2(gray_4x4):
    # s = (o + 0.5) * 2 - 0.5 -> 0.5, 2.5 -> rounded half away: 1, 3
    out = resize(gray_4x4, 2, 2, "nearest")
    assert out.tobytes() == bytes([5, 7, 13, 15])


@pytest.mark.parametrize("out_size", [(5, 7), (8, 9), (13, 20), (5, 14), (40, 40)])
def test_nearest_corner_mapping_when_enlarging(make_buffer, out_size):
    img = make_buffer(5, 7, 3, seed=3)
    out = resize(img, out_size[0], out_size[1], ResizeMethod.NEAREST)
    assert out.pixel(0, 0) == img.pixel(0, 0)
    assert out.pixel(out.width - 1, out.height - 1) == img.pixel(img.width - 1, img.height - 1)


def test_nearest_shrink_samples_pixel_centres():
    # 4 -> 1: s = 0.5 * 4 - 0.5 = 1.5 -> 2, not the corner
    row = PixelBuffer(np.arange(4, dtype=np.uint8).reshape(1, 4))
    assert resize(row, 1, 1, "nearest").tobytes() == bytes([2])
    # 5 -> 2: s = 0.75, 3.25 -> 1, 3
    row = PixelBuffer(np.arange(5, dtype=np.uint8).reshape(1, 5))
    assert resize(row, 2, 1, "nearest").tobytes() == bytes([1, 3])


def test_nearest_copies_pixels_verbatim(rgba_image):
    out = resize(rgba_image, 40, 30, "nearest")
    src_pixels = {rgba_image.pixel(x, y) for y in range(rgba_image.height) for x in range(rgba_image.width)}
    for y in range(out.height):
        for x in range(out.width):
            assert out.pixel(x, y) in src_pixels


def test_bilinear_hand_computed_row():
    img = PixelBuffer(np.array([[0, 100]], dtype=np.uint8))
    out = resize(img, 4, 1, "bilinear")
    # s = -0.25, 0.25, 0.75, 1.25; the first sample extrapolates and clamps to 0
    assert out.tobytes() == bytes([0, 25, 75, 100])


def test_bilinear_uniform_neighbours_exact():
    arr = np.empty((9, 13, 3), dtype=np.uint8)
    arr[..., 0], arr[..., 1], arr[..., 2] = 0, 128, 255
    img = PixelBuffer(arr)
    for w, h in [(4, 3), (26, 18), (13, 9), (1, 1)]:
        out = resize(img, w, h, "bilinear")
        assert np.all(out.array[..., 0] == 0)
        assert np.all(out.array[..., 1] == 128)
        assert np.all(out.array[..., 2] == 255)


def test_bilinear_clamps_boundary_extrapolation():
    img = PixelBuffer(np.array([[0, 255], [255, 0]], dtype=np.uint8))
    out = resize(img, 4, 4, "bilinear")
    assert out.array.dtype == np.uint8
    # (0, 0) extrapolates to about -159 and (3, 0) to about 319
    assert out.at(0, 0, 0) == 0
    assert out.at(3, 0, 0) == 255


def test_same_size_is_identity(rgb_image):
    for method in METHODS:
        out = resize(rgb_image, rgb_image.width, rgb_image.height, method)
        assert out == rgb_image


def test_input_not_mutated(rgb_image):
    before = rgb_image.array.copy()
    resize(rgb_image, 11, 60, "bilinear", Parallel(3))
    assert np.array_equal(before, rgb_image.array)


@pytest.mark.parametrize("method", METHODS)
@pytest.mark.parametrize("channels", [1, 3, 4])
@pytest.mark.parametrize("size", [(1, 1), (3, 200), (61, 17), (150, 130)])
@pytest.mark.parametrize("threads", [0, 1, 2, 8])
def test_parallel_matches_sequential(make_buffer, method, channels, size, threads):
    img = make_buffer(29, 41, channels, seed=channels)
    seq = resize(img, size[0], size[1], method, Sequential())
    par = resize(img, size[0], size[1], method, Parallel(threads))
    assert compare_images(seq, par).different_values == 0
    assert seq == par


@pytest.mark.parametrize(
    "args",
    [(0, 5), (5, 0), (-1, 3), (2.5, 3), (True, 3)],
)
def test_invalid_sizes_rejected(rgb_image, args):
    with pytest.raises(InvalidArgumentError):
        resize(rgb_image, args[0], args[1], "nearest")


def test_non_buffer_rejected():
    with pytest.raises(InvalidArgumentError):
        resize(np.zeros((4, 4, 3), dtype=np.uint8), 2, 2, "nearest")


def test_parallel_propagates_worker_errors():
    def kernel(start, stop):
        if start > 0:
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        Parallel(4).run(kernel, 8)


def test_parallel_covers_every_row_once():
    seen = []

    def kernel(start, stop):
        seen.extend(range(start, stop))

    Parallel(3).run(kernel, 10)
    assert sorted(seen) == list(range(10))
