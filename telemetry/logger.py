from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from engine.error_handler import log_error
from engine.tactics.events import ALL_EVENTS, CombatEvent, CombatEventBus


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


@dataclass
class TelemetryLogger:
    """Appends combat events to a JSON-lines file, one row per event."""
    path: Optional[Path] = None
    enabled: bool = True
    flush_each_write: bool = False
    _rows_written: int = 0
    _started_at: float = field(default_factory=time.time)

    def init(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Touch file (don't overwrite)
        self.path.touch(exist_ok=True)
        self.log("telemetry_init", file=str(self.path))

    def attach(self, bus: CombatEventBus) -> None:
        """Record every event the bus delivers."""
        bus.subscribe(ALL_EVENTS, self.record)

    def record(self, event: CombatEvent) -> None:
        self.log(event.kind, **{k: v for k, v in event.to_dict().items() if k != "kind"})

    def log(self, event: str, **fields: Any) -> None:
        if not self.enabled or self.path is None:
            return

        row: Dict[str, Any] = {
            "t": time.time(),
            "ts": _now_iso(),
            "event": event,
            **fields,
        }

        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(row, ensure_ascii=False, default=list) + "\n")
                if self.flush_each_write:
                    f.flush()
        except OSError as e:
            # Telemetry must never break a turn.
            log_error(e, "TelemetryLogger.log")
            return
        self._rows_written += 1

    @property
    def rows_written(self) -> int:
        return self._rows_written


# global singleton (easy import everywhere)
telemetry = TelemetryLogger()
