from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(key_func=get_remote_address)


def _database_url():
    url = os.getenv('DATABASE_URL', 'sqlite:///couplegames.db')
    # Some hosts still hand out the pre-1.4 scheme
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def config_name_from_env():
    """Environment name from FLASK_ENV. Unset means production."""
    return os.getenv('FLASK_ENV', 'production')


def create_app(config_name=None):
    config_name = config_name or config_name_from_env()
    app = Flask(__name__)

    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    # Config
    app.config['ENV_NAME'] = config_name
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_url()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    # Hebrew messages go out as-is, not \u escapes
    app.json.ensure_ascii = False
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 2592000))
    app.config['BCRYPT_ROUNDS'] = int(os.getenv('BCRYPT_ROUNDS', 12))
    app.config['GOOGLE_CLIENT_ID'] = os.getenv('GOOGLE_CLIENT_ID', '')
    app.config['VERIFICATION_TOKEN_HOURS'] = int(os.getenv('VERIFICATION_TOKEN_HOURS', 24))
    app.config['RATELIMIT_ENABLED'] = True

    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'
        app.config['BCRYPT_ROUNDS'] = 10
        app.config['RATELIMIT_ENABLED'] = False

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    CORS(app, origins=os.getenv('CORS_ORIGINS', '*').split(','))

    from couplegames import models  # noqa: F401  (registers tables on db.metadata)

    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning("Could not create database tables: %s", e)

    from couplegames.errors import register_error_handlers
    register_error_handlers(app)

    # Register routes
    from couplegames.routes import register_routes
    register_routes(app)

    # Health check
    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'ok'}, 200

    return app
