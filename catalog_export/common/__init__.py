# Common utilities
from .config_loader import ExportSettings, load_config, load_export_settings
from .errors import ExportError, ExportInProgressError
from .log_config import setup_logging
