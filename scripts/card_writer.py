from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pytz


@dataclass(frozen=True)
class CardWriter:
    output_dir: Path
    filename: str = "stats.svg"
    timestamped_copy: bool = False

    def timestamped_name(self, now: datetime) -> str:
        if now.tzinfo is None:
            now = pytz.UTC.localize(now)
        stamp = now.astimezone(pytz.UTC).strftime("%Y%m%dT%H%M%SZ")
        path = Path(self.filename)
        return f"{path.stem}-{stamp}{path.suffix}"

    def write(self, svg: str, now: Optional[datetime] = None) -> List[Path]:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written = [self.output_dir / self.filename]
        if self.timestamped_copy:
            written.append(self.output_dir / self.timestamped_name(now or datetime.now(pytz.UTC)))
        for path in written:
            path.write_text(svg, encoding="utf-8")
        return written
