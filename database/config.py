# database/config.py
"""Where activities and learned state are stored, per environment."""

import os
from typing import Dict, Any, Optional

from sqlalchemy.pool import StaticPool

ENVIRONMENTS = {
    'development': ('DEV_DATABASE_URL', 'sqlite:///focus_sessions_dev.db'),
    'production': ('DATABASE_URL', 'sqlite:///focus_sessions.db'),
    'testing': ('TEST_DATABASE_URL', 'sqlite:///:memory:'),
}


class DatabaseConfig:
    """Resolves database URLs and engine options."""

    @staticmethod
    def get_database_url(environment: str = 'development') -> str:
        env_var, default = ENVIRONMENTS.get(environment, ENVIRONMENTS['development'])
        return os.getenv(env_var, default)

    @staticmethod
    def is_memory_url(url: str) -> bool:
        return url in ('sqlite://', 'sqlite:///:memory:')

    @staticmethod
    def get_engine_kwargs(url: Optional[str] = None, echo: Optional[bool] = None) -> Dict[str, Any]:
        """
        Engine options for `url` (default: the development database).

        SQLite connections are shared with the tracker's polling thread. An in-memory
        database is pinned to a single connection, otherwise every session would see
        its own empty database.
        """
        url = url or DatabaseConfig.get_database_url()
        if echo is None:
            echo = os.getenv('SQL_DEBUG', 'false').lower() == 'true'

        kwargs: Dict[str, Any] = {'echo': echo}
        if not url.startswith('sqlite'):
            kwargs['pool_pre_ping'] = True
            return kwargs

        kwargs['connect_args'] = {'check_same_thread': False, 'timeout': 20}
        if DatabaseConfig.is_memory_url(url):
            kwargs['poolclass'] = StaticPool
        return kwargs
