"""Translated caption lookup for components."""

import reflex as rx

from invoice_editor.state import AppState


def t(key: str) -> rx.Var:
    """Return the caption for key in the current language."""
    return AppState.labels[key]
