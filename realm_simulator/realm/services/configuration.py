from __future__ import annotations

from typing import Any, Optional

from django.db import OperationalError, ProgrammingError, connections

from realm.models import SiteSetting


def get_value(key: str, default: Optional[str] = None, *, using: str = "default") -> Optional[str]:
    table = SiteSetting._meta.db_table
    if not _table_exists(using, table):
        return default
    try:
        return SiteSetting.objects.using(using).get(key=key).value
    except SiteSetting.DoesNotExist:
        return default
    except (OperationalError, ProgrammingError):
        return default


def set_value(key: str, value: Any) -> None:
    SiteSetting.objects.update_or_create(key=key, defaults={"value": str(value)})


def _table_exists(connection_alias: str, table_name: str) -> bool:
    try:
        return table_name in connections[connection_alias].introspection.table_names()
    except (OperationalError, ProgrammingError):
        return False
