"""Session banner shown at the start of each interactive shell.

Rendering is a pure function of the clock, the config files and the cache
store; nothing here may abort the shell's startup.
"""

from .render import compose, render_banner, render_left_column, render_right_column

__all__ = ["compose", "render_banner", "render_left_column", "render_right_column"]
