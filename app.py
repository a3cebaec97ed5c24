import logging

from flasgger import Swagger
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from api.exception import TaskboardError
from config import Config
from models import db
from services.accounts import bcrypt
from services.blobs import LocalBlobStore
from services.store import build_store
from services.weather import WeatherService
from utils.app_context import EXTENSION_KEY

logger = logging.getLogger(__name__)

migrate = Migrate()


def register_error_handlers(app):
    @app.errorhandler(TaskboardError)
    def handle_taskboard_error(e):
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.error("Unhandled error: %s", e, exc_info=True)
        return jsonify({"error": str(e)}), 500


def register_blueprints(app):
    from auth.auth import auth_bp
    from routes.board_routes import board_bp
    from routes.drawings_routes import drawings_bp
    from routes.gemini_summary_routes import gemini_summary_bp
    from routes.notes_routes import notes_bp
    from routes.projects_routes import projects_bp
    from routes.share_routes import share_bp
    from routes.summaries_routes import summaries_bp
    from routes.task_notes_routes import task_notes_bp
    from routes.tasks_routes import tasks_bp
    from routes.upload_files_routes import upload_bp
    from routes.weather_routes import weather_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(projects_bp, url_prefix='/api')
    app.register_blueprint(tasks_bp, url_prefix='/api')
    app.register_blueprint(notes_bp, url_prefix='/api')
    app.register_blueprint(task_notes_bp, url_prefix='/api')
    app.register_blueprint(upload_bp, url_prefix='/api')
    app.register_blueprint(board_bp, url_prefix='/api')
    app.register_blueprint(drawings_bp, url_prefix='/api/drawings')
    app.register_blueprint(summaries_bp, url_prefix='/api/summaries')
    app.register_blueprint(gemini_summary_bp, url_prefix='/api')
    app.register_blueprint(share_bp, url_prefix='/api/share')
    app.register_blueprint(weather_bp, url_prefix='/api/weather')


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    CORS(app)
    Swagger(app)
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)

    app.extensions[EXTENSION_KEY] = {
        'store': build_store(app.config),
        'blobs': LocalBlobStore(
            app.config['UPLOAD_FOLDER'],
            max_size=app.config.get('MAX_CONTENT_LENGTH'),
        ),
        'weather': WeatherService(
            app.config.get('OPENWEATHER_API_KEY'),
            timeout=app.config.get('HTTP_TIMEOUT', 10),
        ),
        'gemini': None,
    }

    register_error_handlers(app)
    register_blueprints(app)

    @app.route('/health', methods=['GET'])
    def health():
        backend = 'mock' if app.config.get('USE_MOCK_BACKEND') else 'sql'
        return jsonify({'status': 'ok', 'backend': backend})

    if not app.config.get('USE_MOCK_BACKEND'):
        # create tables
        with app.app_context():
            db.create_all()
        logger.info("Tables created successfully")

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
