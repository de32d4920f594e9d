"""
Persisted UI preferences: language and theme, per browser.

Values live in a diskcache directory so they survive restarts. Each browser
is identified by an id kept in its local storage, and every key is scoped
to that id, so one visitor's choices never reach another's tabs. Observers
registered with subscribe() are called with (name, value) after each change
made through the same Preferences object.
"""

from functools import cache
from pathlib import Path
from typing import Callable

import diskcache

from invoice_editor.config import load_settings
from invoice_editor.errors import ValidationError
from invoice_editor.i18n import DEFAULT_LANGUAGE, LANGUAGES, normalize_language
from invoice_editor.lib import logs

LOG = logs.logger(__file__)

THEMES = ("light", "dark")
DEFAULT_THEME = "light"
DEFAULT_BROWSER_ID = "local"

_LANGUAGE_KEY = "language"
_THEME_KEY = "theme"

PreferenceCallback = Callable[[str, str], None]


class Preferences:
    """
    Language and theme of one browser, backed by a disk cache.

    Attributes:
        browser_id: Scope of every key read or written.
    """

    def __init__(
        self,
        cache: diskcache.Cache | str | Path,
        browser_id: str = DEFAULT_BROWSER_ID,
    ) -> None:
        """
        Args:
            cache: An open diskcache.Cache shared with other browsers, or a
                   directory to open a private one in (closed by close()).
            browser_id: Identifier of the browser these values belong to.
        """
        if isinstance(cache, diskcache.Cache):
            self._cache = cache
            self._owns_cache = False
        else:
            self._cache = diskcache.Cache(str(cache))
            self._owns_cache = True
        self.browser_id = browser_id or DEFAULT_BROWSER_ID
        self._callbacks: list[PreferenceCallback] = []

    def _key(self, name: str) -> str:
        return f"{self.browser_id}:{name}"

    @property
    def language(self) -> str:
        return self._cache.get(self._key(_LANGUAGE_KEY), default=DEFAULT_LANGUAGE)

    @property
    def saved_language(self) -> str | None:
        """The language explicitly chosen in this browser, if any."""
        return self._cache.get(self._key(_LANGUAGE_KEY), default=None)

    @property
    def theme(self) -> str:
        return self._cache.get(self._key(_THEME_KEY), default=DEFAULT_THEME)

    def set_language(self, language: str) -> str:
        """
        Persist the UI language.

        Raises:
            ValidationError: If the language is not one of en, vi, nl.
        """
        resolved = normalize_language(language)
        if resolved is None:
            raise ValidationError(
                "language", f"Unsupported language: {language!r} (expected {sorted(LANGUAGES)})"
            )
        self._store(_LANGUAGE_KEY, resolved)
        return resolved

    def set_theme(self, theme: str) -> str:
        """
        Persist the colour theme.

        Raises:
            ValidationError: If the theme is not light or dark.
        """
        if theme not in THEMES:
            raise ValidationError("theme", f"Unsupported theme: {theme!r}")
        self._store(_THEME_KEY, theme)
        return theme

    def toggle_theme(self) -> str:
        return self.set_theme("light" if self.theme == "dark" else "dark")

    def subscribe(self, callback: PreferenceCallback) -> Callable[[], None]:
        """Register an observer; returns a callable that removes it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def close(self) -> None:
        """Close the cache if this object opened it."""
        self._callbacks = []
        if self._owns_cache:
            self._cache.close()

    def _store(self, name: str, value: str) -> None:
        key = self._key(name)
        if self._cache.get(key, default=None) == value:
            return
        self._cache.set(key, value)
        LOG.info("Preference %s set to %s for browser %s", name, value, self.browser_id)
        for callback in list(self._callbacks):
            callback(name, value)


@cache
def _shared_cache() -> diskcache.Cache:
    return diskcache.Cache(str(load_settings().prefs_dir))


def get_preferences(browser_id: str = DEFAULT_BROWSER_ID) -> Preferences:
    """Return the preferences of one browser in the configured directory."""
    return Preferences(_shared_cache(), browser_id)
