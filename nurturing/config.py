import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Base configuration class."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = 86400  # 24 hours
    
    # Shared secret for external cron triggers (Vercel Cron, GitHub Actions, ...)
    CRON_SECRET = os.environ.get('CRON_SECRET')
    
    # Nurturing engine configuration
    START_SCHEDULER = os.environ.get('START_SCHEDULER', 'false').lower() == 'true'
    NURTURING_POLL_INTERVAL_SECONDS = int(os.environ.get('NURTURING_POLL_INTERVAL_SECONDS', '300'))  # 5 minutes
    NURTURING_BATCH_SIZE = int(os.environ.get('NURTURING_BATCH_SIZE', '0')) or None  # 0 = unlimited
    DEFAULT_SEQUENCE_NAME = os.environ.get('DEFAULT_SEQUENCE_NAME', 'Relance - Pas de réponse')
    
    # Channel fallbacks, used when an organisation has no integration config of its own
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
    NURTURING_EMAIL_FROM = os.environ.get('NURTURING_EMAIL_FROM')
    TWILIO_ACCOUNT_SID = os.environ.get('TWILIO_ACCOUNT_SID')
    TWILIO_AUTH_TOKEN = os.environ.get('TWILIO_AUTH_TOKEN')
    TWILIO_SMS_FROM = os.environ.get('TWILIO_SMS_FROM')
    TWILIO_WHATSAPP_NUMBER = os.environ.get('TWILIO_WHATSAPP_NUMBER')
    WHATSAPP_PHONE_NUMBER_ID = os.environ.get('WHATSAPP_PHONE_NUMBER_ID')
    WHATSAPP_ACCESS_TOKEN = os.environ.get('WHATSAPP_ACCESS_TOKEN')
    
    # CORS configuration
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    
    # Logging configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///nurturing.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = True
    
    # Development-specific settings
    TESTING = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    
    # Production database (PostgreSQL)
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    
    # Production security settings
    SECRET_KEY = os.environ.get('SECRET_KEY')
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')
    
    # Production CORS (more restrictive)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '').split(',')
    
    @classmethod
    def validate_config(cls):
        """Validate production configuration."""
        if not cls.SQLALCHEMY_DATABASE_URI:
            raise ValueError("DATABASE_URL environment variable is required for production")
        
        if not cls.SECRET_KEY:
            raise ValueError("SECRET_KEY environment variable is required for production")
        
        if not cls.JWT_SECRET_KEY:
            raise ValueError("JWT_SECRET_KEY environment variable is required for production")
        
        if not cls.CRON_SECRET:
            raise ValueError("CRON_SECRET environment variable is required for production")
        
        if not cls.CORS_ORIGINS or cls.CORS_ORIGINS == ['']:
            raise ValueError("CORS_ORIGINS environment variable is required for production")


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    START_SCHEDULER = False
    CRON_SECRET = None
    RESEND_API_KEY = None
    TWILIO_ACCOUNT_SID = None
    TWILIO_AUTH_TOKEN = None
    WHATSAPP_PHONE_NUMBER_ID = None
    WHATSAPP_ACCESS_TOKEN = None


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
