import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from .db import engine as default_engine, init_db

# ---------- DB logging handler ----------

class DBHandler(logging.Handler):
    def __init__(self, bind: Optional[Engine] = None):
        super().__init__()
        self.bind = bind or default_engine

    def emit(self, record: logging.LogRecord) -> None:
        msg = self.format(record)
        try:
            with self.bind.begin() as conn:
                conn.execute(
                    text("INSERT INTO logs (level, msg) VALUES (:lvl, :msg)"),
                    {"lvl": record.levelname, "msg": msg},
                )
        except SQLAlchemyError:
            self.handleError(record)


def setup_logging(bind: Optional[Engine] = None, to_db: bool = True) -> None:
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, DBHandler) for h in root.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        root.addHandler(sh)
    if to_db and not any(isinstance(h, DBHandler) for h in root.handlers):
        init_db(bind)
        dbh = DBHandler(bind)
        dbh.setFormatter(logging.Formatter("%(name)s %(message)s"))
        root.addHandler(dbh)

# ---------- Consultas para o painel ----------

def get_events(
    bind: Optional[Engine] = None,
    limit: int = 300,
    level: Optional[str] = None,
    q: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    offset: int = 0,
) -> List[Dict[str, Any]]:
    sql = "SELECT ts, level, msg FROM logs"
    conds: List[str] = []
    params: Dict[str, Any] = {}
    if level in ("INFO", "WARNING", "ERROR"):
        conds.append("level = :lvl")
        params["lvl"] = level
    if q:
        conds.append("LOWER(msg) LIKE :q")
        params["q"] = f"%{q.lower()}%"
    if start:
        conds.append("ts >= :start")
        params["start"] = start
    if end:
        conds.append("ts <= :end")
        params["end"] = end
    if conds:
        sql += " WHERE " + " AND ".join(conds)
    sql += " ORDER BY id DESC"
    sql += f" LIMIT {int(limit)} OFFSET {int(max(0, offset))}"
    with (bind or default_engine).connect() as conn:
        rows = conn.execute(text(sql), params).mappings().all()
    return [dict(r) for r in rows]
