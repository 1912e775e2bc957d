from __future__ import annotations

import logging
from typing import Callable, Optional

from pipelines.runner import RunContext
from services.connections_service import ConnectionsService
from services.errors import DuplicateEmail


class PersistConnections:
    def __init__(self, service: ConnectionsService, on_processed: Optional[Callable[[int], None]] = None) -> None:
        self.service = service
        self.on_processed = on_processed

    def run(self, ctx: RunContext) -> RunContext:
        processed = 0
        skipped = 0
        for record in (ctx.records or []):
            try:
                self.service.create_connection(ctx.owner_email, record)
            except DuplicateEmail:
                skipped += 1
                logging.info(
                    f"Skipping existing contact {record.get('email')}",
                    extra={"step": "persist_connections", "status": "duplicate"},
                )
                continue
            processed += 1
            if self.on_processed:
                self.on_processed(processed)
        ctx.meta["processed_connections"] = processed
        ctx.meta["skipped_duplicates"] = skipped
        return ctx
