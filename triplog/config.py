import os


class Config:
    """Application configuration from environment variables."""

    # Database
    DATABASE_URL = os.environ.get('DATABASE_URL', 'sqlite:///triplog.db')

    # Flask
    FLASK_ENV = os.environ.get('FLASK_ENV', 'production')
    DEBUG = FLASK_ENV == 'development'
    FLASK_HOST = os.environ.get('FLASK_HOST', '127.0.0.1')
    FLASK_PORT = int(os.environ.get('FLASK_PORT', 8080))
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_UPLOAD_BYTES', 16 * 1024 * 1024))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Background enrichment
    ENABLE_SCHEDULER = os.environ.get('ENABLE_SCHEDULER', 'true').lower() == 'true'
    ENRICHMENT_INTERVAL_MINUTES = int(os.environ.get('ENRICHMENT_INTERVAL_MINUTES', 30))
    WEATHER_THROTTLE_SECONDS = float(os.environ.get('WEATHER_THROTTLE_SECONDS', 0.2))
    WEATHER_API_TIMEOUT = float(os.environ.get('WEATHER_API_TIMEOUT', 10))

    # Default user preferences (overridden by persisted settings)
    DEFAULT_UNIT_SYSTEM = os.environ.get('DEFAULT_UNIT_SYSTEM', 'imperial')
    DEFAULT_GAS_PRICE = float(os.environ.get('DEFAULT_GAS_PRICE', 3.00))  # $/gal
    DEFAULT_ICE_EFFICIENCY = float(os.environ.get('DEFAULT_ICE_EFFICIENCY', 30))  # mpg
    DEFAULT_ELEC_RATE = float(os.environ.get('DEFAULT_ELEC_RATE', 0.15))  # $/kWh
    DEFAULT_BATTERY_CAPACITY_KWH = float(os.environ.get('DEFAULT_BATTERY_CAPACITY_KWH', 78))
