import pytest

from escapetime import SET_PIXEL, ColormapPolicy, LinearColourPolicy, Pixel, colour_table, linear_colour


def test_set_pixel_is_opaque_black():
    assert SET_PIXEL == Pixel(0, 0, 0, 255)
    assert SET_PIXEL.to_bytes() == b"\x00\x00\x00\xff"


def test_linear_colour_half_fraction():
    assert linear_colour(1, 2) == Pixel(6, 64, 128, 255)


def test_linear_colour_full_fraction():
    assert linear_colour(25, 25) == Pixel(13, 128, 255, 255)


def test_linear_colour_saturates_channels():
    assert linear_colour(1000, 25) == Pixel(255, 255, 255, 255)


def test_linear_colour_factors_are_tunable():
    red_only = LinearColourPolicy(red=1.0, green=0.0, blue=0.0)
    assert red_only(1, 2) == Pixel(128, 0, 0, 255)


def test_colormap_policy_is_opaque():
    policy = ColormapPolicy("viridis")
    for iterations in (1, 5, 25, 100):
        assert policy(iterations, 25).a == 255


def test_colormap_policy_invert_reverses_ramp():
    plain = ColormapPolicy("viridis")
    inverted = ColormapPolicy("viridis", invert=True)
    assert inverted(10, 10) == plain(0, 10)
    assert plain(10, 10) != plain(0, 10)


def test_colormap_policy_rejects_unknown_name():
    with pytest.raises(ValueError):
        ColormapPolicy("no-such-colormap")


def test_colour_table_rows():
    table = colour_table(linear_colour, 2, 10)
    assert table.shape == (12, 4)
    assert tuple(table[0]) == (0, 0, 0, 255)
    assert tuple(table[11]) == (0, 0, 0, 255)
    assert tuple(table[1]) == (6, 64, 128, 255)
    for iterations in range(1, 11):
        assert Pixel(*(int(v) for v in table[iterations])) == linear_colour(iterations, 2)


def test_colour_table_accepts_any_callable():
    table = colour_table(lambda iterations, threshold: Pixel(iterations, 0, 0), 5, 3)
    assert [int(v) for v in table[:, 0]] == [0, 1, 2, 3, 0]
