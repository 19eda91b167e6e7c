from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
import json
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Session-scoped character analytics live on the app, not in a module global
    from cheetahtype.services.sessions import SessionAnalyticsStore
    flask_app.extensions['session_analytics'] = SessionAnalyticsStore(
        ttl_seconds=flask_app.config.get('SESSION_ANALYTICS_TTL_SEC', 1800)
    )

    from cheetahtype.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from cheetahtype.main import main
    flask_app.register_blueprint(main)

    from cheetahtype.api.users import users
    from cheetahtype.api.typing_tests import typing_tests
    from cheetahtype.api.leaderboard import leaderboard
    from cheetahtype.api.character_performance import character_performance
    from cheetahtype.api.site_stats import site_stats
    from cheetahtype.api.practice_text import practice_text
    flask_app.register_blueprint(users, url_prefix='/api/users')
    flask_app.register_blueprint(typing_tests, url_prefix='/api/tests')
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')
    flask_app.register_blueprint(character_performance, url_prefix='/api/character-performance')
    flask_app.register_blueprint(site_stats, url_prefix='/api/stats')
    flask_app.register_blueprint(practice_text, url_prefix='/api/practice-text')

    from cheetahtype.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Flask-Login user loader
    from cheetahtype.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from cheetahtype.services.seeding import seed_demo_data
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            created = seed_demo_data()
            click.echo(f'Database has been reset and seeded with {created} tests!')

    @click.command('import-legacy')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def import_legacy_command(path):
        """Imports legacy result rows from a JSON array file."""
        from cheetahtype.services.legacy import import_legacy_rows
        with open(path, encoding='utf-8') as fh:
            rows = json.load(fh)
        with flask_app.app_context():
            summary = import_legacy_rows(rows)
        click.echo(f"Imported {summary['imported']} rows, skipped {summary['skipped']}.")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(import_legacy_command)

    return flask_app
