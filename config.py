"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


class Config:
    """Base configuration class with common settings."""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/scheduler.db'
    # Seconds a writer waits for the SQLite write lock before giving up
    DATABASE_TIMEOUT = _env_float('DATABASE_TIMEOUT', 10.0)

    # Timezone used for calendar dates, weekdays and lounge hours
    TIMEZONE = os.environ.get('TIMEZONE') or 'America/Los_Angeles'

    # Guest Suite
    GUEST_SUITE_WEEKDAY_RATE = _env_float('GUEST_SUITE_WEEKDAY_RATE', 125)
    GUEST_SUITE_WEEKEND_RATE = _env_float('GUEST_SUITE_WEEKEND_RATE', 175)
    GUEST_SUITE_MIN_NIGHTS = _env_int('GUEST_SUITE_MIN_NIGHTS', 2)

    # Sky Lounge
    SKY_LOUNGE_FLAT_RATE = _env_float('SKY_LOUNGE_FLAT_RATE', 300)
    SKY_LOUNGE_OPEN_HOUR = _env_int('SKY_LOUNGE_OPEN_HOUR', 10)
    SKY_LOUNGE_CLOSE_HOUR = _env_int('SKY_LOUNGE_CLOSE_HOUR', 18)
    SKY_LOUNGE_BLOCK_HOURS = _env_int('SKY_LOUNGE_BLOCK_HOURS', 4)

    # Gear Shed
    GEAR_SHED_RATE = _env_float('GEAR_SHED_RATE', 0)

    # Cancellation
    CANCELLATION_FEE_GUEST_SUITE = _env_float('CANCELLATION_FEE_GUEST_SUITE', 75)
    CANCELLATION_FEE_SKY_LOUNGE = _env_float('CANCELLATION_FEE_SKY_LOUNGE', 150)
    CANCELLATION_FEE_GEAR_SHED = _env_float('CANCELLATION_FEE_GEAR_SHED', 0)
    CANCELLATION_WINDOW_HOURS = _env_int('CANCELLATION_WINDOW_HOURS', 72)

    # Application settings
    APP_NAME = 'Amenity Scheduler'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    DATABASE_PATH = os.environ.get('DATABASE_PATH', ':memory:')
    DATABASE_TIMEOUT = 5.0
    SECRET_KEY = 'test-secret-key'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
