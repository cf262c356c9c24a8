from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config
from arena.services.room import ArenaCoordinator, ArenaSettings, MemoryStateStore

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

WS_NAMESPACE = '/ws'


def room_channel(room_id: str) -> str:
    return f"arena:{room_id}"


def _broadcast(room_id, event, payload):
    socketio.emit(event, payload, to=room_channel(room_id), namespace=WS_NAMESPACE)


def get_coordinator(app=None) -> ArenaCoordinator:
    app = app or current_app
    return app.extensions['arena']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One coordinator per app; its store broadcasts through Socket.IO rooms
    settings = ArenaSettings.from_config(flask_app.config)
    store = MemoryStateStore(broadcaster=_broadcast, logger=flask_app.logger)
    flask_app.extensions['arena'] = ArenaCoordinator(settings=settings, store=store, logger=flask_app.logger)

    from arena.main import main
    flask_app.register_blueprint(main)

    from arena.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/arena')

    from arena.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from arena.models import Account

    @login_manager.user_loader
    def load_user(account_id):
        return db.session.get(Account, int(account_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for username in ['player1', 'player2', 'player3']:
                account = Account(username=username)
                account.set_password('password')
                db.session.add(account)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
