"""Text presentation for the contact views."""

from __future__ import annotations

from rolodex.ui.render import render, render_detail, render_form, render_list

__all__ = ["render", "render_detail", "render_form", "render_list"]
