# ==============================================================================
# quotacheck/__init__.py
# ------------------------------------------------------------------------------
# Package setup: logging configuration and the default lookup tables.
# ==============================================================================

import logging
from config import Config

__version__ = '1.0.0'

def configure(config_class=Config):
    """
    Configures logging for a validation session and loads the region tables.

    Args:
        config_class (class): The configuration class to use.

    Returns:
        RegionTables: The lookup tables every run of this session should use.
    """
    from quotacheck.validator.regions import RegionTables

    level = getattr(logging, str(config_class.LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(level=level,
                        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    if config_class.REGION_TABLES_PATH:
        tables = RegionTables.from_file(config_class.REGION_TABLES_PATH)
        logging.info(f"Region tables loaded from '{config_class.REGION_TABLES_PATH}'.")
    else:
        tables = RegionTables()

    logging.info('Quota file validator startup complete')
    return tables
