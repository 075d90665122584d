from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()

SESSION_EXTENSION = 'bingo_session'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    CORS(flask_app, origins=flask_app.config.get('CORS_ORIGINS', []))

    # Only the hash of the host key is kept around for request checks
    flask_app.config['HOST_KEY_HASH'] = bcrypt.generate_password_hash(flask_app.config['HOST_KEY'])

    # One live session per process: built here, booted with a full reset,
    # closed by run.py on shutdown
    from bingo.services.game import Session, load_phrases
    phrases = load_phrases(flask_app.config.get('PHRASES_FILE'))
    session = Session(
        phrases,
        pool_target=int(flask_app.config.get('SCORECARD_POOL_TARGET', 20)),
        max_full_card_winners=int(flask_app.config.get('MAX_FULL_CARD_WINNERS', 3)),
    )
    session.reset(drop_players=True)
    flask_app.extensions[SESSION_EXTENSION] = session
    flask_app.logger.info(f"[boot] session ready phrases={len(phrases)}")

    # Import and register blueprints here
    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api')

    # Ensure the directory table is known to SQLAlchemy before create_all
    import bingo.models  # noqa: F401
    with flask_app.app_context():
        db.create_all()

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the player directory tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Player directory has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
