# app/__init__.py
import os
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask
from supabase import create_client

from src.api import BASE_URL, JokeClient

from .services.favorites import FavoritesStore, JsonFavoritesStore, SupabaseFavoritesStore
from .services.feed import DEFAULT_START_TERM, JokeFeed

# Load .env as early as possible so env vars are available everywhere
load_dotenv()

DEFAULT_FAVORITES_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "favorites.json")


def _env_float(name: str) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else None


def _env_int(name: str) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else None


def build_favorites_store(app: Flask) -> FavoritesStore:
    """Supabase when configured, else the local JSON file."""
    url = app.config.get("SUPABASE_URL")
    key = app.config.get("SUPABASE_ANON_KEY")
    if url and key:
        try:
            client = create_client(url, key)
            app.logger.info("Supabase configured for favorites.")
            return SupabaseFavoritesStore(client)
        except Exception as e:
            app.logger.warning("Supabase client init failed: %s", e)
    else:
        app.logger.info("Supabase env vars missing. Keeping favorites in %s", app.config["FAVORITES_PATH"])
    return JsonFavoritesStore(app.config["FAVORITES_PATH"])


def create_app(
    config: Optional[dict] = None,
    favorites: Optional[FavoritesStore] = None,
    source: Any = None,
) -> Flask:
    """Application factory.

    ``favorites`` and ``source`` (anything with random/by_id/search) are
    injected by tests; otherwise they come from the environment.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev")
    app.config["APP_NAME"] = os.getenv("APP_NAME", "Dad Jokes")
    app.config["JOKES_API_URL"] = os.getenv("JOKES_API_URL", BASE_URL)
    app.config["JOKES_API_TIMEOUT"] = _env_float("JOKES_API_TIMEOUT")
    app.config["JOKES_MAX_ATTEMPTS"] = _env_int("JOKES_MAX_ATTEMPTS")
    app.config["JOKES_START_TERM"] = os.getenv("JOKES_START_TERM", DEFAULT_START_TERM)
    app.config["FAVORITES_PATH"] = os.getenv("FAVORITES_PATH", DEFAULT_FAVORITES_PATH)
    app.config["SUPABASE_URL"] = os.getenv("SUPABASE_URL")
    app.config["SUPABASE_ANON_KEY"] = os.getenv("SUPABASE_ANON_KEY")
    if config:
        app.config.update(config)

    if favorites is None:
        favorites = build_favorites_store(app)
    if source is None:
        source = JokeClient(app.config["JOKES_API_URL"], timeout=app.config["JOKES_API_TIMEOUT"])

    app.extensions["favorites"] = favorites
    app.extensions["joke_feed"] = JokeFeed(
        source,
        favorites=favorites,
        max_attempts=app.config["JOKES_MAX_ATTEMPTS"],
    )

    from .routes import bp as main_bp
    app.register_blueprint(main_bp)

    # Make APP_NAME available in templates (base.html uses this)
    @app.context_processor
    def inject_globals():
        return {"APP_NAME": app.config["APP_NAME"]}

    return app
