import numpy as np

from escapetime import (
    ColormapPolicy,
    Coordinate,
    RenderConfig,
    RenderDriver,
    Viewport,
    evaluate,
    map_pixel,
    render_image,
    render_iterations,
)

SQUARE = Viewport(Coordinate(-2.0, -2.0), Coordinate(2.0, 2.0))


def test_render_iterations_scenario():
    config = RenderConfig(width=2, height=2, viewport=SQUARE, escape_threshold=2, loop_threshold=10)
    iterations = render_iterations(config)
    assert iterations.shape == (2, 2)
    np.testing.assert_array_equal(iterations, np.array([[1, 1], [11, 11]], dtype=np.int32))


def test_render_iterations_matches_evaluate():
    config = RenderConfig(width=20, height=14, escape_threshold=2, loop_threshold=60)
    iterations = render_iterations(config)
    for y in range(config.height):
        for x in range(config.width):
            coordinate = map_pixel(x, y, config.viewport, config.width, config.height)
            assert iterations[y, x] == evaluate(coordinate, config.loop_threshold, config.escape_threshold)


def test_render_iterations_zero_loop_threshold():
    config = RenderConfig(width=4, height=4, viewport=SQUARE, escape_threshold=2, loop_threshold=0)
    assert np.all(render_iterations(config) == 1)


def test_render_image_matches_driver_emit():
    config = RenderConfig(width=16, height=10, escape_threshold=2, loop_threshold=40)
    driver = RenderDriver(config)
    driver.advance_all()
    assert render_image(config) == driver.emit()


def test_render_image_with_colormap_policy():
    config = RenderConfig(width=6, height=4, viewport=SQUARE, escape_threshold=2, loop_threshold=10)
    policy = ColormapPolicy("inferno")
    driver = RenderDriver(config, colour_policy=policy)
    driver.advance_all()
    data = render_image(config, policy)
    assert len(data) == 4 * 6 * 4
    assert data == driver.emit()
