import os
import logging
import traceback
from flask import Flask, jsonify
from flask_cors import CORS

from nurturing.config import config
from nurturing.extensions import db, jwt

# Global scheduler instance - set by create_app()
nurturing_scheduler = None

def create_app(config_name=None):
    """Application factory pattern."""
    app = Flask(__name__)
    
    # Load configuration
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')
    
    app.config.from_object(config[config_name])
    
    # Validate production configuration if needed
    if config_name == 'production':
        config[config_name].validate_config()
    
    # Configure CORS
    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)
    
    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)
    
    # Configure logging first so we can see route registration errors
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = logging.FileHandler('logs/nurturing.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(log_level)
        logging.getLogger('nurturing').addHandler(file_handler)
        app.logger.info('Nurturing API startup')
    app.logger.setLevel(log_level)
    logging.getLogger('nurturing').setLevel(log_level)
    
    # Register blueprints with error handling
    try:
        from nurturing.routes.nurturing import nurturing_bp
        app.register_blueprint(nurturing_bp, url_prefix='/api/v1/nurturing')
        app.logger.info("Registered nurturing blueprint")
    except Exception as e:
        app.logger.error(f"Failed to register nurturing blueprint: {str(e)}")
        app.logger.error(f"Nurturing blueprint error traceback: {traceback.format_exc()}")
    
    try:
        from nurturing.routes.automation import automation_bp
        app.register_blueprint(automation_bp, url_prefix='/api/v1/automation')
        app.logger.info("Registered automation blueprint")
    except Exception as e:
        app.logger.error(f"Failed to register automation blueprint: {str(e)}")
        app.logger.error(f"Automation blueprint error traceback: {traceback.format_exc()}")
    
    # Initialize scheduler with app context
    from nurturing.services.scheduler import get_nurturing_scheduler
    global nurturing_scheduler
    nurturing_scheduler = get_nurturing_scheduler()
    nurturing_scheduler.init_app(app)
    
    # Start scheduler in production or when explicitly requested
    if config_name == 'production' or app.config.get('START_SCHEDULER', False):
        try:
            nurturing_scheduler.start()
            app.logger.info("Nurturing scheduler started automatically")
        except Exception as e:
            app.logger.error(f"Failed to start scheduler: {str(e)}")
    
    # Create database tables (avoid fatal boot failures in production)
    try:
        with app.app_context():
            # In production, only run if explicitly enabled
            if config_name != 'production' or os.environ.get('STARTUP_DB_CREATE_ALL', 'false').lower() == 'true':
                db.create_all()
                app.logger.info("Database tables created/verified")
            else:
                app.logger.info("Skipping db.create_all() on startup in production")
    except Exception as e:
        app.logger.error(f"Failed to create/verify database tables on startup: {str(e)}")
    
    # Register global error handlers
    from nurturing.utils.error_handlers import register_error_handlers
    register_error_handlers(app)
    
    # Simple health check endpoint
    @app.route('/')
    def index():
        return jsonify({'status': 'ok', 'message': 'Nurturing API is running'})
    
    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=5001, debug=True)
