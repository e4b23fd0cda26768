"""Public pages of the standalone host app."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from pagetrack.core import __version__


router = APIRouter()

INDEX_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>pagetrack</title>
</head>
<body>
<h1>pagetrack %s</h1>
<p>This page is served by the host app and carries the tracking code when it is enabled.</p>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    return HTMLResponse(INDEX_PAGE % __version__)
