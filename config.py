# ==============================================================================
# config.py
# ------------------------------------------------------------------------------
# Configuration settings for the quota validation tool.
# Uses environment variables so local overrides stay out of version control.
# ==============================================================================

import os
from dotenv import load_dotenv

# Determine the absolute path of the project directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load environment variables from a .env file located in the project root
load_dotenv(os.path.join(basedir, '.env'))

class Config:
    """
    Base configuration class. Every value can be overridden through the
    environment (or the .env file).
    """
    # --- Logging ---
    LOG_LEVEL = os.environ.get('QUOTACHECK_LOG_LEVEL') or 'INFO'

    # --- Run defaults ---
    # Region preselected when the command line does not name one.
    DEFAULT_REGION = os.environ.get('QUOTACHECK_DEFAULT_REGION') or 'APAC'

    # --- Lookup tables ---
    # Optional JSON file overriding the built-in country/segment/geo tables.
    REGION_TABLES_PATH = os.environ.get('QUOTACHECK_REGION_TABLES') or None

    # --- Export Configuration ---
    # Default folder where CSV reports are written.
    EXPORT_FOLDER = os.environ.get('QUOTACHECK_EXPORT_FOLDER') or \
        os.path.join(basedir, 'instance/exports')

    # Specifies the allowed file extensions for uploaded workbooks.
    ALLOWED_EXTENSIONS = {'.xlsx', '.xlsm'}
