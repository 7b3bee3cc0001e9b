"""Lobby and help routes."""

from xitzin import Request, Xitzin

from ..app import get_store


def register_routes(app: Xitzin) -> None:
    """Register home routes."""

    @app.gemini("/", name="home")
    def home(request: Request):
        store = get_store(request.app)
        return app.template("home.gmi", games=store.list_games(), message="")

    @app.gemini("/help", name="help")
    def help_page(request: Request):
        return app.template("help.gmi")
