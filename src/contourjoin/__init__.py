"""contourjoin - Rebuild whole-image contours from per-frame boundary traces.

Large label maps are traced one frame (tile) at a time. Regions that cross a
frame border come out of the tracer torn into open fragments or into closed
per-frame pieces. contourjoin splices them back into the closed contours a
single whole-image trace would have produced, keeping labels and the
outer/hole winding convention.

Example:
    $ contourjoin frames.json --dx 1 --dy 1

This will create frames-joined.json next to the input.
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
