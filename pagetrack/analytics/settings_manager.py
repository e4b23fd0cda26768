"""Admin-facing read/validate/write component for AnalyticsConfig."""

from collections.abc import Mapping
from typing import Any

from pagetrack.core.logging import get_logger
from pagetrack.utils.escaping import escape_attr, escape_html, sanitize_text_field

from . import i18n
from .models import AnalyticsConfig, coerce_bool
from .store import AnalyticsConfigStore


logger = get_logger(__name__)

ACTIVE_FIELD = "active"
TRACKING_ID_FIELD = "tracking_id"
TRACKING_ID_PLACEHOLDER = "UA-#######-#"
NONCE_FIELD = "_pagetrack_nonce"

FORM_TEMPLATE = """<!DOCTYPE html>
<html lang="%(lang)s">
<head>
<meta charset="utf-8">
<title>%(title)s</title>
</head>
<body>
<div class="wrap">
  <h2>%(title)s</h2>
%(notice)s  <form action="%(action)s" method="post">
    <input type="hidden" name="%(nonce_field)s" value="%(nonce)s">
    <table class="form-table" role="presentation">
      <tr>
        <th scope="row"><label for="%(active_field)s">%(active_label)s</label></th>
        <td><input type="checkbox" id="%(active_field)s" name="%(active_field)s" value="1"%(checked)s></td>
      </tr>
      <tr>
        <th scope="row"><label for="%(id_field)s">%(id_label)s</label></th>
        <td><input type="text" id="%(id_field)s" name="%(id_field)s" placeholder="%(placeholder)s" value="%(tracking_id)s"></td>
      </tr>
    </table>
    <p class="submit">
      <input name="save" type="submit" class="button-primary" value="%(save_label)s">
    </p>
  </form>
</div>
</body>
</html>
"""

NOTICE_TEMPLATE = """  <div id="setting-error-settings_updated" class="updated settings-error">
    <p><strong>%s</strong></p>
  </div>
"""


class SettingsManager:
    """Renders the settings form and applies submitted values."""

    def __init__(
        self,
        store: AnalyticsConfigStore,
        translator: i18n.Translator | None = None,
        form_action: str = "",
    ):
        self.store = store
        self.translate = translator or i18n.Translator()
        self.form_action = form_action

    async def render_form(self, saved: bool = False, nonce: str = "") -> str:
        """Return the settings page pre-filled from the stored record.

        When ``saved`` is true the page shows the save confirmation notice.
        ``nonce`` is posted back in a hidden field.
        """
        _ = self.translate
        config = await self.store.get()
        notice = NOTICE_TEMPLATE % escape_html(_(i18n.SAVED_NOTICE)) if saved else ""
        return FORM_TEMPLATE % {
            "lang": escape_attr(self.translate.locale),
            "title": escape_html(_(i18n.PAGE_TITLE)),
            "notice": notice,
            "action": escape_attr(self.form_action),
            "nonce_field": NONCE_FIELD,
            "nonce": escape_attr(nonce),
            "active_field": ACTIVE_FIELD,
            "active_label": escape_html(_(i18n.FIELD_ACTIVE)),
            "checked": " checked" if config.active else "",
            "id_field": TRACKING_ID_FIELD,
            "id_label": escape_html(_(i18n.FIELD_TRACKING_ID)),
            "placeholder": escape_attr(TRACKING_ID_PLACEHOLDER),
            "tracking_id": escape_attr(config.tracking_id),
            "save_label": escape_attr(_(i18n.SAVE_BUTTON)),
        }

    @staticmethod
    def validate(raw: Mapping[str, Any]) -> AnalyticsConfig:
        """Build a clean record from raw form input without storing it.

        An unchecked checkbox is simply absent from the submission, so a
        missing ``active`` key means inactive.
        """
        return AnalyticsConfig(
            active=coerce_bool(raw.get(ACTIVE_FIELD)),
            tracking_id=sanitize_text_field(raw.get(TRACKING_ID_FIELD)),
        )

    async def validate_and_save(self, raw: Mapping[str, Any]) -> AnalyticsConfig:
        """Sanitize ``raw``, write it to the store and return the stored record."""
        config = self.validate(raw)
        stored = await self.store.set(config)
        logger.info(
            "analytics_settings_updated",
            active=stored.active,
            tracking_id=stored.tracking_id,
        )
        return stored

