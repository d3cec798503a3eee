"""
Multiple series
===============

Series are passed as a list of lists of records.  The nearest point is searched
across all series; the tooltip shows the series label next to the coordinates.
Dragging a rectangle with the left button zooms into it.
"""

import matplotlib.pyplot as plt
import numpy as np
import scatterpick
np.random.seed(42)

fig, ax = plt.subplots()
ax.set_title("Drag to zoom")

data = [[(x, y) for x, y in np.random.normal(loc, .5, (100, 2))]
        for loc in [0, 1, 2]]
scatterpick.scatter(
    data, x_accessor=0, y_accessor=1,
    labels=["low", "mid", "high"], colors=["tab:blue", "tab:orange"],
    brush=True)

plt.show()
