"""런타임 스키마 동기화 유틸리티.

이전 리비전으로 생성된 DB(예: section/group_number/drive_link 컬럼이 없는 projects)에
모델에만 있는 컬럼과 인덱스를 추가한다. 테이블 자체는 ``create_all``이 만든다.
"""

from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateColumn, CreateIndex, MetaData

logger = logging.getLogger(__name__)


def sync_missing_schema_objects(engine: Engine, metadata: MetaData) -> list[str]:
    """누락된 컬럼/인덱스를 추가하고 추가한 객체 이름 목록(``table.column``)을 반환한다."""
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    preparer = engine.dialect.identifier_preparer
    added: list[str] = []

    with engine.begin() as conn:
        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue

            existing_columns = {col["name"] for col in inspector.get_columns(table.name)}
            table_sql = preparer.format_table(table)
            for column in table.columns:
                if column.name in existing_columns:
                    continue
                # NOT NULL 컬럼은 기존 행 때문에 ALTER가 실패하므로 nullable로 추가
                column_sql = str(CreateColumn(column).compile(dialect=engine.dialect)).strip()
                column_sql = column_sql.replace(" NOT NULL", "")
                conn.execute(text(f"ALTER TABLE {table_sql} ADD COLUMN {column_sql}"))
                added.append(f"{table.name}.{column.name}")

            existing_indexes = {idx.get("name") for idx in inspector.get_indexes(table.name)}
            for index in table.indexes:
                if index.name and index.name not in existing_indexes:
                    conn.execute(CreateIndex(index))
                    added.append(f"{table.name}.{index.name}")

    if added:
        logger.info("[schema] added missing objects: %s", ", ".join(added))
    return added
