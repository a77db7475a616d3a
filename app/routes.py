from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from .services.favorites import FavoritesStore
from .services.feed import JokeFeed

bp = Blueprint("main", __name__)

FETCH_FAILED = "Couldn't fetch a joke right now."


def _feed() -> JokeFeed:
    return current_app.extensions["joke_feed"]


def _favorites() -> FavoritesStore:
    return current_app.extensions["favorites"]


def _joke_json(joke) -> dict:
    return {"id": joke.id, "joke": joke.text, "setup": joke.setup, "is_favorite": joke.is_favorite}


@bp.route("/", methods=["GET"])
def index():
    feed = _feed()
    # make certain at least one joke on first visit
    if not feed.has_jokes:
        if feed.ensure_started(current_app.config["JOKES_START_TERM"]) is None:
            flash(FETCH_FAILED)
    return render_template("index.html", jokes=feed.jokes)


@bp.post("/jokes/new")
def new_joke():
    if _feed().fetch_until_new() is None:
        flash(FETCH_FAILED)
    return redirect(url_for("main.index"))


@bp.post("/jokes/search")
def search_joke():
    term = (request.form.get("term") or "").strip()
    if _feed().fetch_by_search(term) is None:
        flash(FETCH_FAILED)
    return redirect(url_for("main.index"))


@bp.post("/jokes/by-id")
def joke_by_id():
    joke_id = (request.form.get("joke_id") or "").strip()
    if not joke_id:
        flash("Enter a joke id.")
        return redirect(url_for("main.index"))
    feed = _feed()
    if feed.has_seen(joke_id):
        flash("That joke is already in your list.")
    elif feed.fetch_until_new(joke_id) is None:
        flash(FETCH_FAILED)
    return redirect(url_for("main.index"))


@bp.get("/jokes/<joke_id>")
def joke_detail(joke_id):
    joke = _feed().get(joke_id)
    if joke is None:
        abort(404)
    return render_template("joke.html", joke=joke)


@bp.post("/jokes/<joke_id>/delete")
def delete_joke(joke_id):
    if not _feed().remove(joke_id):
        abort(404)
    return redirect(url_for("main.index"))


@bp.post("/jokes/<joke_id>/favorite")
def toggle_favorite(joke_id):
    flag = _feed().toggle_favorite(joke_id)
    if flag is None:
        abort(404)
    current_app.logger.info("joke %s favorite=%s", joke_id, flag)
    nxt = request.form.get("next") or ""
    # only follow local paths
    if not nxt.startswith("/") or nxt.startswith("//"):
        nxt = url_for("main.index")
    return redirect(nxt)


@bp.get("/favorites")
def favorites():
    return render_template("favorites.html", jokes=_favorites().list())


@bp.post("/favorites/<joke_id>/delete")
def delete_favorite(joke_id):
    store = _favorites()
    joke = next((j for j in store.list() if j.id == joke_id), None)
    if joke is None:
        abort(404)
    if not store.remove(joke):
        current_app.logger.warning("could not remove favorite %s", joke_id)
    return redirect(url_for("main.favorites"))


@bp.get("/api/jokes")
def api_jokes():
    return jsonify(jokes=[_joke_json(j) for j in _feed().jokes])


@bp.get("/api/favorites")
def api_favorites():
    return jsonify(favorites=[_joke_json(j) for j in _favorites().list()])


@bp.route("/health")
def health():
    return {"ok": True}
