from .settings import get_database_url, get_log_level, setup_logging

__all__ = ['get_database_url', 'get_log_level', 'setup_logging']
