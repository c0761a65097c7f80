import math

import cv2
import numpy as np

from barviz.constants import BACKGROUND_COLOR


class BarRenderer:
    """
    Draws controller frames onto OpenCV canvases.
    Holds no visualizer state of its own; everything comes from the frame.
    """

    def __init__(self, width, height, bg_color=BACKGROUND_COLOR):
        self.w = width
        self.h = height
        self.bg_color = bg_color

    def blank(self):
        return np.full((self.h, self.w, 3), self.bg_color, dtype=np.uint8)

    def draw(self, bar_frame, canvas=None):
        """
        Render every bar rectangle of `bar_frame`. Returns a BGR image.
        """
        if canvas is None:
            canvas = self.blank()

        for rect in bar_frame.rects:
            self._draw_bar(canvas, rect, bar_frame.corner_radius, bar_frame.color)

        return canvas

    def _draw_bar(self, canvas, rect, radius, color):
        x0 = int(round(rect.x))
        y0 = int(round(rect.y))
        x1 = int(round(rect.x + rect.width)) - 1
        y1 = int(round(rect.y + rect.height)) - 1

        # Flat bars have nothing to show
        if x1 < x0 or y1 < y0:
            return

        # Corners can never be rounder than the bar is wide or tall
        r = int(min(math.floor(radius), (x1 - x0) // 2, (y1 - y0) // 2))
        if r <= 0:
            cv2.rectangle(canvas, (x0, y0), (x1, y1), color, -1)
            return

        # Cross of two rectangles plus a filled circle in each corner
        cv2.rectangle(canvas, (x0 + r, y0), (x1 - r, y1), color, -1)
        cv2.rectangle(canvas, (x0, y0 + r), (x1, y1 - r), color, -1)
        for cx, cy in ((x0 + r, y0 + r), (x1 - r, y0 + r), (x0 + r, y1 - r), (x1 - r, y1 - r)):
            cv2.circle(canvas, (cx, cy), r, color, -1, cv2.LINE_AA)
