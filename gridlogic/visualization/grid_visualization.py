import plotly.graph_objects as go

from gridlogic.engine.grid import Grid
from gridlogic.engine.values import get_color_name

# plotly marker symbol per cell shape
SHAPE_SYMBOLS = {
    "circle": "circle",
    "square": "square",
    "triangle": "triangle-up",
}


def generate_grid_visualization(grid: Grid, title: str = "Which statement is true?"):
    """Generate a Plotly figure from a puzzle grid. Row 0 is drawn at the top."""
    fig = go.Figure()

    for shape, symbol in SHAPE_SYMBOLS.items():
        cells = [cell for cell in grid if cell.shape == shape]
        if not cells:
            continue
        fig.add_trace(go.Scatter(
            x=[cell.col for cell in cells],
            y=[cell.row for cell in cells],
            mode="markers+text",
            text=[str(cell.number) for cell in cells],
            textposition="middle center",
            textfont=dict(size=18, color="black"),
            marker=dict(symbol=symbol, size=60, color=[cell.color for cell in cells], line=dict(width=2, color="#444")),
            hovertext=[f"{get_color_name(cell.color)} {cell.shape} ({cell.number})" for cell in cells],
            hoverinfo="text",
            name=shape,
        ))

    fig.update_layout(
        title=title,
        showlegend=False,
        plot_bgcolor="white",
        xaxis=dict(visible=False, range=[-0.5, grid.size - 0.5]),
        yaxis=dict(visible=False, range=[grid.size - 0.5, -0.5]),
        height=600,
        width=600,
    )

    return fig
