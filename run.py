import os

from pickem import create_app, db
from pickem.models import Game, Pick, Profile, Result

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {"db": db, "Game": Game, "Pick": Pick, "Profile": Profile, "Result": Result}


if __name__ == "__main__":
    # Development server only; production runs under a WSGI server
    app.run(
        host=os.environ.get("PICKEM_HOST", "127.0.0.1"),
        port=int(os.environ.get("PICKEM_PORT", "5000")),
        debug=app.config.get("DEBUG", False),
    )
