"""
HistoryStorage - DuckDB persistence for per-epoch loss curves.
"""

import json
import math
import os
from typing import Any, Dict, List, Optional

import duckdb


class HistoryStorage:
    """
    Store loss curves in DuckDB.

    Data layout:
    - table ``loss_points``: model (text), epoch (int), train_loss, val_loss
    - table ``metadata``: key/value pairs (baseline loss, run metadata as JSON)
    """

    def __init__(self, db_path: str = ":memory:", mode: str = "create"):
        """
        Open the store.

        Args:
            db_path: DuckDB file path, or ``":memory:"``
            mode: 'create' replaces an existing file, 'append' keeps it
        """
        self.db_path = db_path
        self.mode = mode

        if db_path != ":memory:":
            db_dir = os.path.dirname(os.path.abspath(db_path))
            os.makedirs(db_dir, exist_ok=True)
            if mode == "create" and os.path.exists(db_path):
                os.remove(db_path)

        self.conn = duckdb.connect(db_path)
        self._initialize_schema()

    def _initialize_schema(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS loss_points (
                model TEXT,
                epoch INTEGER,
                train_loss DOUBLE,
                val_loss DOUBLE
            )
        """)
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS metadata (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

    def save_point(self, model: str, epoch: int, train_loss: float, val_loss: Optional[float]):
        """Append one (epoch, train_loss, val_loss) point for ``model``."""
        self.conn.execute(
            "INSERT INTO loss_points (model, epoch, train_loss, val_loss) VALUES (?, ?, ?, ?)",
            [model, int(epoch), float(train_loss), None if val_loss is None else float(val_loss)],
        )

    def save_history(self, model: str, train_losses: List[float], val_losses: List[Optional[float]]):
        """Replace all points of ``model`` with the given curves."""
        self.conn.execute("DELETE FROM loss_points WHERE model = ?", [model])
        rows = [
            [model, epoch, float(t), None if v is None else float(v)]
            for epoch, (t, v) in enumerate(zip(train_losses, val_losses))
        ]
        if rows:
            self.conn.executemany(
                "INSERT INTO loss_points (model, epoch, train_loss, val_loss) VALUES (?, ?, ?, ?)",
                rows,
            )

    def get_history(self, model: str) -> Dict[str, List]:
        """Return the curves recorded for ``model``, ordered by epoch."""
        frame = self.conn.execute(
            """
            SELECT epoch, train_loss, val_loss
            FROM loss_points
            WHERE model = ?
            ORDER BY epoch
            """,
            [model],
        ).df()
        return {
            "epochs": [int(e) for e in frame["epoch"].tolist()],
            "train_loss": frame["train_loss"].tolist(),
            "val_loss": frame["val_loss"].tolist(),
        }

    def list_models(self) -> List[str]:
        rows = self.conn.execute("SELECT DISTINCT model FROM loss_points ORDER BY model").fetchall()
        return [r[0] for r in rows]

    def _set_value(self, key: str, value: str):
        self.conn.execute("DELETE FROM metadata WHERE key = ?", [key])
        self.conn.execute("INSERT INTO metadata (key, value) VALUES (?, ?)", [key, value])

    def _get_value(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM metadata WHERE key = ?", [key]).fetchone()
        return row[0] if row else None

    def save_baseline(self, baseline_loss: float):
        self._set_value("baseline_loss", str(float(baseline_loss)))

    def get_baseline(self) -> Optional[float]:
        value = self._get_value("baseline_loss")
        return float(value) if value is not None else None

    def save_metadata(self, metadata: Dict[str, Any]):
        """Store a metadata dictionary, serialized as JSON."""
        self._set_value("full_metadata", json.dumps(metadata, indent=2, ensure_ascii=False))

    def get_metadata(self) -> Optional[Dict[str, Any]]:
        value = self._get_value("full_metadata")
        return json.loads(value) if value is not None else None

    def close(self):
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def export_for_frontend(self, output_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Export all curves in a plotting-friendly layout.

        Args:
            output_path: Optional JSON file to write

        Returns:
            ``{"baseline_loss": ..., "models": {name: {"epochs", "train_loss",
            "val_loss"}}, "metadata": ...}``
        """
        result: Dict[str, Any] = {
            "baseline_loss": self.get_baseline(),
            "models": {name: self.get_history(name) for name in self.list_models()},
        }
        metadata = self.get_metadata()
        if metadata:
            result["metadata"] = metadata

        # NaN/Inf are not valid JSON
        def _sanitize(obj):
            if isinstance(obj, float):
                return obj if math.isfinite(obj) else None
            if isinstance(obj, dict):
                return {k: _sanitize(v) for k, v in obj.items()}
            if isinstance(obj, (list, tuple)):
                return [_sanitize(v) for v in obj]
            return obj

        sanitized = _sanitize(result)

        if output_path:
            with open(output_path, "w") as f:
                json.dump(sanitized, f, indent=2)

        return sanitized
