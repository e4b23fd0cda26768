"""Translations for the labels of the analytics settings page."""

import gettext
from pathlib import Path

from pagetrack.core.logging import get_logger


logger = get_logger(__name__)

TEXT_DOMAIN = "pagetrack"

# Source strings, kept together so catalogs can be extracted from one place
MENU_LABEL = "Analytics"
PAGE_TITLE = "Google Analytics"
FIELD_ACTIVE = "Is Active"
FIELD_TRACKING_ID = "Your Google Analytics ID"
SAVE_BUTTON = "Save Changes"
SAVED_NOTICE = "Settings saved."
SETTINGS_LINK = "Settings"


class Translator:
    """Looks labels up in the ``pagetrack`` text domain for one locale.

    Catalogs are read from ``<locale_dir>/<locale>/LC_MESSAGES/pagetrack.mo``.
    When no catalog is found the English source strings are returned.
    """

    def __init__(self, locale: str = "en", locale_dir: Path | None = None):
        self.locale = locale
        self.locale_dir = locale_dir
        self._translations = gettext.translation(
            TEXT_DOMAIN,
            localedir=str(locale_dir) if locale_dir else None,
            languages=[locale],
            fallback=True,
        )
        if type(self._translations) is gettext.NullTranslations:
            logger.debug(
                "translation_catalog_not_found",
                domain=TEXT_DOMAIN,
                locale=locale,
                locale_dir=str(locale_dir) if locale_dir else None,
            )

    def __call__(self, message: str) -> str:
        return self._translations.gettext(message)
