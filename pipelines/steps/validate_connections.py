from __future__ import annotations

from data_validator import ConnectionValidator
from pipelines.runner import RunContext
from services.mapping import map_all


class ValidateConnections:
    def __init__(self) -> None:
        self.validator = ConnectionValidator()

    def run(self, ctx: RunContext) -> RunContext:
        candidates = map_all(ctx.records or [])
        valid, rejected = self.validator.validate_all(candidates)
        unique = self.validator.remove_duplicates(valid)
        # Downstream steps only ever see normalized values
        ctx.records = [o.normalized.model_dump() for o in unique]
        ctx.meta["rejected"] = rejected
        ctx.meta["duplicates_in_batch"] = len(valid) - len(unique)
        ctx.meta["validation_stats"] = self.validator.get_validation_stats()
        return ctx
