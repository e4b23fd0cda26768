"""Render-time decision producing the tracking script, or nothing."""

from pagetrack.core.logging import get_logger
from pagetrack.utils.escaping import escape_js

from .models import AnalyticsConfig, UserContext
from .store import AnalyticsConfigStore


logger = get_logger(__name__)

# The analytics.js loader; the tracking id is the only interpolation point
TRACKING_SCRIPT_TEMPLATE = """<script>
  (function(i,s,o,g,r,a,m){i['GoogleAnalyticsObject']=r;i[r]=i[r]||function(){
  (i[r].q=i[r].q||[]).push(arguments)},i[r].l=1*new Date();a=s.createElement(o),
  m=s.getElementsByTagName(o)[0];a.async=1;a.src=g;m.parentNode.insertBefore(a,m)
  })(window,document,'script','https://www.google-analytics.com/analytics.js','ga');

  ga('create', '%(tracking_id)s', 'auto');
  ga('send', 'pageview');
</script>"""


def render_tracking_script(config: AnalyticsConfig, user: UserContext) -> str | None:
    """Return the tracking script for ``user`` under ``config``, or None.

    Nothing is emitted when the add-on is inactive, when no tracking id is
    configured, or when the visitor is logged in.
    """
    if not config.active or not config.tracking_id:
        return None
    if user.is_authenticated:
        return None
    return TRACKING_SCRIPT_TEMPLATE % {"tracking_id": escape_js(config.tracking_id)}


class SnippetEmitter:
    """Reads the current record on every call and decides what to emit."""

    def __init__(self, store: AnalyticsConfigStore):
        self.store = store

    async def maybe_emit_tracking_script(self, user: UserContext) -> str | None:
        config = await self.store.get()
        snippet = render_tracking_script(config, user)
        logger.debug(
            "tracking_script_decision",
            emitted=snippet is not None,
            active=config.active,
            has_tracking_id=bool(config.tracking_id),
            authenticated=user.is_authenticated,
        )
        return snippet
