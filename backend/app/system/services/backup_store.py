"""
SQLAlchemy 表存储 - BackupEngine 的数据库实现

- 基于 Base.metadata 中的表定义做 Core 级 select / insert / delete
- JSON 快照中的日期时间是 ISO 字符串，写回 Date/DateTime 列前先转换
- 驱动异常统一包装为 TableStoreError，并回滚当前未提交的批次
- checkpoint() 提交事务：引擎在删除阶段结束后、每张表插入完成后调用
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List

from sqlalchemy import Date, DateTime, MetaData, Table, delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.backup.store import ITableStore, Row, TableStoreError

logger = logging.getLogger(__name__)


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def coerce_value(column, value: Any) -> Any:
    """把 JSON 中的 ISO 字符串还原为列类型对应的 Python 值"""
    if not isinstance(value, str):
        return value
    if isinstance(column.type, DateTime):
        return _parse_datetime(value)
    if isinstance(column.type, Date):
        if len(value) > 10:
            return _parse_datetime(value).date()
        return date.fromisoformat(value)
    return value


def _error_message(error: SQLAlchemyError) -> str:
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else str(error)


class SqlAlchemyTableStore(ITableStore):
    """通过 SQLAlchemy Session 访问备份表"""

    def __init__(self, session: Session, metadata: MetaData):
        self.session = session
        self.metadata = metadata

    def _table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise TableStoreError(name, f"Table {name} is not defined")
        return table

    def select_rows(self, table: str, limit: int) -> List[Row]:
        t = self._table(table)
        try:
            result = self.session.execute(select(t).limit(limit))
            return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            self.session.rollback()
            raise TableStoreError(table, _error_message(e)) from e

    def _prepare(self, t: Table, rows: List[Row]) -> List[Dict[str, Any]]:
        columns = {c.name: c for c in t.columns}
        unknown = sorted({k for row in rows for k in row if k not in columns})
        if unknown:
            logger.warning(f"Dropping unknown columns for {t.name}: {', '.join(unknown)}")

        keys = [name for name in columns if any(name in row for row in rows)]
        return [
            {key: coerce_value(columns[key], row.get(key)) for key in keys}
            for row in rows
        ]

    def insert_rows(self, table: str, rows: List[Row]) -> int:
        if not rows:
            return 0
        t = self._table(table)
        try:
            params = self._prepare(t, rows)
            self.session.execute(insert(t), params)
            self.session.flush()
        except (SQLAlchemyError, ValueError) as e:
            self.session.rollback()
            message = _error_message(e) if isinstance(e, SQLAlchemyError) else str(e)
            raise TableStoreError(table, message) from e
        return len(rows)

    def delete_all(self, table: str) -> int:
        t = self._table(table)
        try:
            result = self.session.execute(delete(t))
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise TableStoreError(table, _error_message(e)) from e
        return result.rowcount or 0

    def checkpoint(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise TableStoreError("*", _error_message(e)) from e
