from typing import List, Sequence
import pyqtgraph as pg


def setup_wpm_plot(plot_widget: pg.PlotWidget, line_color: str):
    plot_widget.setBackground(None)
    plot_widget.showGrid(x=False, y=True, alpha=0.15)
    plot_widget.setMenuEnabled(False)
    plot_widget.setMouseEnabled(x=False, y=False)
    plot_widget.hideButtons()
    plot_widget.setClipToView(True)
    plot_widget.setLabel("left", "WPM")
    plot_widget.setLabel("bottom", "Time (s)")
    curve = plot_widget.plot([], [], pen=pg.mkPen(line_color, width=2.5), antialias=True, symbol="o", symbolSize=5)
    return curve


def update_curve(curve, x: Sequence[float], y: List[float]):
    curve.setData(list(x), y)


def setup_bar_plot(plot_widget: pg.PlotWidget, y_label: str):
    plot_widget.setBackground(None)
    plot_widget.showGrid(x=False, y=True, alpha=0.1)
    plot_widget.setMenuEnabled(False)
    plot_widget.setMouseEnabled(x=False, y=False)
    plot_widget.hideButtons()
    plot_widget.enableAutoRange("y", True)
    plot_widget.setLabel("left", y_label)
    # persistent bar item, updated in place
    bar = pg.BarGraphItem(x=[], height=[], width=0.8)
    plot_widget.addItem(bar)
    return bar


def update_bars(plot_widget: pg.PlotWidget, bar, labels: List[str], heights: List[float]):
    bar.setOpts(x=list(range(len(labels))), height=heights, width=0.8)
    plot_widget.getAxis("bottom").setTicks([[(i, k) for i, k in enumerate(labels)]])
