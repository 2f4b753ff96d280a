"""
Flask application factory.

Routing table:
    /          any method   -> status JSON
    /graphql   OPTIONS      -> 204 preflight answer
    /graphql   POST         -> GraphQL adapter
    /sitemap   GET          -> sitemap XML
    /health    any method   -> "OK"
Other methods on /graphql and /sitemap get 405, unknown paths 404.

CORS headers are computed before routing and forced onto every response,
error responses included.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException, MethodNotAllowed
from werkzeug.routing import Rule

from .config import Settings, load_settings
from .cors import compute_cors
from .errors import internal_error_response
from .graphql_adapter import AriadneExecutor, Executor, handle_graphql
from .resolvers import POSTS_TABLE, StoreFactory, build_schema
from .sitemap import generate_sitemap
from .store import SupabaseStore
from .trophies import TrophyClient

logger = logging.getLogger(__name__)

ROOT_MESSAGE = "API is running. Use /graphql for queries."


def _cors_for_current_request(settings: Settings) -> dict[str, str]:
    return compute_cors(
        request.method,
        request.headers.get("Origin"),
        request.headers.get("Access-Control-Request-Headers"),
        settings.allowed_origins,
    )


def _any_method_route(app: Flask, path: str, view) -> None:
    # a werkzeug Rule without methods matches every verb, TRACE and WebDAV ones included
    app.url_map.add(Rule(path, endpoint=view.__name__))
    app.view_functions[view.__name__] = view


def create_app(
    settings: Optional[Settings] = None,
    store_factory: Optional[StoreFactory] = None,
    trophy_client: Optional[TrophyClient] = None,
    executor: Optional[Executor] = None,
) -> Flask:
    """
    Build the gateway.

    - settings: frozen runtime configuration; loaded from the environment when omitted.
    - store_factory(access_token) -> StoreClient; defaults to one SupabaseStore
      (one connection pool) for the lifetime of the app.
    - trophy_client: GitHub trophy lookup used by the `trophies` query.
    - executor: GraphQL executor; defaults to ariadne over the blog schema.
    """
    settings = settings or load_settings()

    store_factory = store_factory or SupabaseStore(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout=settings.http_timeout,
    )
    trophy_client = trophy_client or TrophyClient(settings.trophy_service_url, timeout=settings.http_timeout)
    executor = executor or AriadneExecutor(build_schema(store_factory, trophy_client), debug=settings.debug)

    app = Flask(__name__)
    app.config["BLOG_API_SETTINGS"] = settings

    # -------------------------------------------------------------------
    # request hooks: CORS negotiation happens before any handler runs
    # -------------------------------------------------------------------
    @app.before_request
    def negotiate_cors():
        logger.info(f"Handling request: {request.method} {request.url}")
        g.cors_headers = _cors_for_current_request(settings)

    @app.after_request
    def attach_cors(response: Response) -> Response:
        cors_headers = g.get("cors_headers") or _cors_for_current_request(settings)
        for name, value in cors_headers.items():
            response.headers[name] = value
        return response

    # -------------------------------------------------------------------
    # error handlers
    # -------------------------------------------------------------------
    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        response = Response(e.name, status=e.code, mimetype="text/plain")
        if isinstance(e, MethodNotAllowed) and e.valid_methods:
            response.headers["Allow"] = ", ".join(e.valid_methods)
        return response

    @app.errorhandler(Exception)
    def unhandled_error(e: Exception):
        logger.error(f"Internal Server Error: {type(e).__name__}: {e}", exc_info=e)
        return internal_error_response(g.get("cors_headers"))

    # -------------------------------------------------------------------
    # routes
    # -------------------------------------------------------------------
    def root():
        return jsonify({"message": ROOT_MESSAGE})

    @app.route("/graphql", methods=["POST", "OPTIONS"])
    def graphql_endpoint():
        if request.method == "OPTIONS":
            return Response(status=204)
        return handle_graphql(request, g.cors_headers, executor)

    @app.route("/sitemap", methods=["GET"], provide_automatic_options=False)
    def sitemap():
        def fetch_posts():
            return store_factory(None).table(POSTS_TABLE).select("id,publish_date").unwrap() or []

        xml = generate_sitemap(settings.base_url, fetch_posts)
        return Response(xml, status=200, content_type="application/xml")

    def health():
        return Response("OK", status=200, mimetype="text/plain")

    _any_method_route(app, "/", root)
    _any_method_route(app, "/health", health)

    return app


__all__ = ["create_app", "ROOT_MESSAGE"]
