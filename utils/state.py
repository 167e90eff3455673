# utils/state.py

import logging


logger = logging.getLogger(__name__)


class AppState:
    """Process-wide session state shared by services and routes."""

    _active_user_id = None
    _active_user_name = None

    @classmethod
    def set_active_user(cls, user_id, user_name):
        logger.debug(
            "[state] set_active_user(%s, %s) (from %s)",
            user_id,
            user_name,
            cls._active_user_id,
        )
        cls._active_user_id = user_id
        cls._active_user_name = user_name

    @classmethod
    def get_active_user_id(cls):
        return cls._active_user_id

    @classmethod
    def get_active_user_name(cls):
        return cls._active_user_name

    @classmethod
    def clear(cls):
        cls._active_user_id = None
        cls._active_user_name = None
