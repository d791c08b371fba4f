"""segpage: a segmented, two-level paged virtual memory simulator."""

__version__ = "0.1.0"
