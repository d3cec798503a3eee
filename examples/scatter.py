"""
Highlight the nearest point
===========================

Hovering over the axes highlights the point closest to the mouse and shows its
coordinates in a tooltip.  Rugs along the margins show the distribution of
each coordinate.
"""

import matplotlib.pyplot as plt
import numpy as np
import scatterpick
np.random.seed(42)

fig, ax = plt.subplots()
ax.set_title("Mouse over the axes")

scatterpick.scatter(
    [{"x": x, "y": y} for x, y in np.random.random((200, 2))],
    x_rug=True, y_rug=True)

plt.show()
