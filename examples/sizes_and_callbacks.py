"""
Point sizes and callbacks
=========================

The radius of each point can be read from its record, and callbacks can react
to the highlighted point changing.
"""

import matplotlib.pyplot as plt
import numpy as np
import scatterpick
np.random.seed(42)

fig, ax = plt.subplots()

records = [{"x": x, "y": y, "r": 2 + 8 * r}
           for x, y, r in np.random.random((50, 3))]
chart = scatterpick.scatter(records, size_accessor="r", marker=True)


@chart.connect("highlight")
def on_highlight(handle):
    ax.set_title(f"Point {handle.index} (radius {handle.data['r']:.1f})")


@chart.connect("leave")
def on_leave(_):
    ax.set_title("")


plt.show()
