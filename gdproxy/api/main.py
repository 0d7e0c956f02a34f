import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import httpx
from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, StreamingResponse
from fastapi.templating import Jinja2Templates
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

from gdproxy.core.config import Settings
from gdproxy.providers.base import StreamTarget
from gdproxy.providers.errors import RelayError
from gdproxy.providers.extractor import EmbedExtractor
from gdproxy.providers.fetcher import Fetcher
from gdproxy.providers.proxy import StreamProxy, relay, response_headers
from gdproxy.providers.resolver import UpstreamResolver

log = logging.getLogger("gdproxy.api")

FRONTEND_DIR = Path(__file__).resolve().parents[1] / "frontend"
STATIC_DIR = FRONTEND_DIR / "static"
templates = Jinja2Templates(directory=str(FRONTEND_DIR / "templates"))

STREAM_PREFIX = "/stream/"


class AnyMethodRoute(APIRoute):
    """Route that answers every HTTP method, including ones like TRACE or PROPFIND."""

    def matches(self, scope):
        match, child_scope = super().matches(scope)
        if match is Match.PARTIAL:
            match = Match.FULL
        return match, child_scope

    async def handle(self, scope, receive, send):
        await self.app(scope, receive, send)


def raw_stream_tail(request: Request, rest: str) -> str:
    """The undecoded path after /stream/, so %2F inside a slug is not a separator."""
    raw = request.scope.get("raw_path")
    if raw:
        path = raw.split(b"?", 1)[0].decode("latin-1")
        if path.startswith(STREAM_PREFIX):
            return path[len(STREAM_PREFIX):]
    return quote(rest, safe="/")


def create_app(
    settings: Optional[Settings] = None,
    *,
    fetcher: Optional[Fetcher] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the relay app. Upstream clients can be injected (tests do)."""
    settings = settings or Settings.from_env()
    fetcher = fetcher or Fetcher(
        timeout=settings.upstream_timeout,
        verify_ssl=settings.verify_ssl,
    )
    http_client = http_client or httpx.AsyncClient(
        timeout=httpx.Timeout(settings.stream_read_timeout,
                              connect=settings.stream_connect_timeout),
        verify=settings.verify_ssl,
        follow_redirects=True,
    )

    resolver = UpstreamResolver(fetcher, api_url=settings.resolver_url,
                                user_agent=settings.user_agent)
    extractor = EmbedExtractor(fetcher, embed_base=settings.embed_base)
    proxy = StreamProxy(extractor, http_client, user_agent=settings.user_agent,
                        forward_range=settings.forward_range)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await fetcher.close()
        await http_client.aclose()

    app = FastAPI(
        title="GDrive Stream Relay",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.router.route_class = AnyMethodRoute

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code,
                                 headers=exc.headers)

    @app.exception_handler(RelayError)
    async def relay_error(request: Request, exc: RelayError):
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    # --- PAGES ---

    @app.api_route("/")
    @app.api_route("/index.html")
    async def read_index():
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html; charset=utf-8")

    # --- RESOLVER ---

    @app.api_route("/api/get-video")
    async def get_video(file_id: Optional[str] = None):
        try:
            data = await resolver.resolve(file_id)
        except RelayError as e:
            return JSONResponse({"status": "error", "message": e.message},
                                status_code=e.status_code)
        return JSONResponse(data)

    @app.api_route("/watch/{slug:path}")
    async def watch_video(slug: str, request: Request):
        return templates.TemplateResponse(request, "watch.html", {"slug": slug})

    # --- STREAM PROXY ---

    @app.api_route("/stream/{rest:path}")
    async def stream_video(rest: str, request: Request):
        target = StreamTarget.parse(raw_stream_tail(request, rest))
        upstream = await proxy.open(target, request.headers)
        return StreamingResponse(
            relay(upstream),
            status_code=upstream.status_code,
            headers=response_headers(upstream),
            background=BackgroundTask(upstream.aclose),
        )

    @app.api_route("/player.js")
    async def player_script():
        return FileResponse(
            STATIC_DIR / "player.js",
            media_type="application/javascript",
            headers={"Cache-Control": "public, max-age=86400"},
        )

    log.info(f"Relay ready (upstream={settings.upstream_host}, range={settings.forward_range})")
    return app


app = create_app()
