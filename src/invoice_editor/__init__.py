"""
Invoice Editor: a Reflex application for composing and storing invoices.

This package provides a browser-based invoice form with a live preview,
PDF export, and per-user cloud persistence backed by Supabase.

Subpackages:
- auth: Identity, session notifications and account operations
- components: Reusable Reflex UI components
- models: Invoice data model, derived totals and serialization
- services: Invoice store clients (demo and Supabase implementations)
- lib: Logging helpers

Main entry points:
- app.main(): Start the development server
- app.app: The Reflex application instance
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
