"""
Configuration settings for the Suffah school document pipeline
"""

import logging
import os
import tempfile


class Config:
    """Base configuration class"""

    # Organization settings
    SCHOOL_NAME = os.environ.get('SCHOOL_NAME') or 'The Suffah Public School & College'
    SCHOOL_ADDRESS = os.environ.get('SCHOOL_ADDRESS') or 'Madyan Swat, Pakistan'
    SCHOOL_TAGLINE = os.environ.get('SCHOOL_TAGLINE') or 'Excellence in Education'
    SCHOOL_PHONE = os.environ.get('SCHOOL_PHONE') or '+92 946 780 000'
    SCHOOL_EMAIL = os.environ.get('SCHOOL_EMAIL') or 'info@suffah.edu.pk'
    SCHOOL_REGISTRATION = os.environ.get('SCHOOL_REGISTRATION') or 'Registered with BISE Swat'
    CURRENCY = os.environ.get('CURRENCY') or 'PKR'

    # Asset settings
    LOGO_PATH = os.environ.get('LOGO_PATH') or '/images/school-logo.png'
    STATIC_ROOT = os.environ.get('STATIC_ROOT') or os.path.join(os.path.dirname(os.path.abspath(__file__)), 'static')
    ASSET_BASE_URL = os.environ.get('ASSET_BASE_URL')  # e.g. https://portal.suffah.edu.pk
    ASSET_TIMEOUT = float(os.environ.get('ASSET_TIMEOUT') or 8)

    # Thresholds
    ATTENDANCE_GOOD_THRESHOLD = 90
    ATTENDANCE_WARNING_THRESHOLD = 75
    COLLECTION_GOOD_THRESHOLD = 90
    COLLECTION_WARNING_THRESHOLD = 70
    PASS_PERCENTAGE = 40

    # Preview settings
    PREVIEW_ZOOM_DEFAULT = 100
    PREVIEW_ZOOM_MIN = 50
    PREVIEW_ZOOM_MAX = 200
    PREVIEW_ZOOM_STEP = 25
    PREVIEW_DIR = os.environ.get('PREVIEW_DIR') or tempfile.gettempdir()

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'


class TestingConfig(Config):
    """Configuration used by the test suite"""

    TESTING = True
    ASSET_TIMEOUT = 1
    ASSET_BASE_URL = None


def configure_logging(config=Config):
    """Install a basic logging setup for host applications."""
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
