"""
Local helper modules shared across the invoice editor.

Modules:
    logs: Logger factory with consistent formatting
"""

from invoice_editor.lib import logs

__all__ = ["logs"]
