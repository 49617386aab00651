"""Administrative tasks: demo data and configuration files."""

from admin.config_utils import init_config, validate_config
from admin.seed import seed_database

__all__ = ["init_config", "seed_database", "validate_config"]
