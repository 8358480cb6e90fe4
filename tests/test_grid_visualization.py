import random

from conftest import make_grid
from gridlogic.engine.grid import Grid
from gridlogic.visualization.grid_visualization import generate_grid_visualization


def test_one_trace_per_shape_present():
    random.seed(12)
    grid = Grid.random()
    fig = generate_grid_visualization(grid)

    shapes = {cell.shape for cell in grid}
    assert {trace.name for trace in fig.data} == shapes
    assert sum(len(trace.text) for trace in fig.data) == 25


def test_markers_use_cell_colors_and_numbers():
    fig = generate_grid_visualization(make_grid(shape="triangle", color="#ffd966", number=7))

    assert len(fig.data) == 1
    trace = fig.data[0]
    assert trace.marker.symbol == "triangle-up"
    assert set(trace.marker.color) == {"#ffd966"}
    assert set(trace.text) == {"7"}
    assert "Yellow triangle (7)" in trace.hovertext
    # row 0 at the top
    assert list(fig.layout.yaxis.range) == [4.5, -0.5]
