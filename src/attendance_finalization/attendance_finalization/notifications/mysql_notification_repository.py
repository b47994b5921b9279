from __future__ import annotations

import json

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, notification: Notification) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, employee_id, title, message, type, category, data, is_read)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(notification.user_id),
                    int(notification.employee_id),
                    notification.title,
                    notification.message,
                    notification.type,
                    notification.category,
                    json.dumps(notification.data),
                ),
            )
            return int(cur.lastrowid)
