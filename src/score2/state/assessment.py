from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone

from score2.models.engine import Parameters, RiskResult


@dataclass
class Assessment:
    parameters: Parameters
    result: RiskResult
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_json(self) -> str:
        payload = {
            "parameters": self.parameters.to_dict(),
            "result": self.result.to_dict(),
            "timestamp": self.timestamp,
        }
        return json.dumps(payload, sort_keys=True)

    @classmethod
    def from_json(cls, payload: str) -> "Assessment":
        data = json.loads(payload)
        return cls(
            parameters=Parameters.from_dict(data["parameters"]),
            result=RiskResult.from_dict(data["result"]),
            timestamp=data["timestamp"],
        )
