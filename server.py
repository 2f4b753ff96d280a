import logging

from blog_api.config import load_settings
from blog_api.app import create_app

settings = load_settings()

# -----------------------------------------------------------------------
# Logging: stdlib logging so deployed instances keep request/error traces
# -----------------------------------------------------------------------
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="[%(asctime)s] %(levelname)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)

if not settings.supabase_url or not settings.supabase_anon_key:
    logger.warning("SUPABASE_URL or SUPABASE_ANON_KEY is not set; post queries will fail")

app = create_app(settings)


if __name__ == "__main__":
    logger.info(f"Server running on http://localhost:{settings.port}")
    app.run(host="0.0.0.0", port=settings.port, debug=settings.debug)
