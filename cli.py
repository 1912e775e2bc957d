import argparse
import json
import logging
import os
import sys
import uuid as _uuid
from pathlib import Path

from config.settings import get_settings
from data_validator import validate_connection
from db import schema
from db.connection import get_connection
from db.repos.connections_repo import ConnectionsRepo
from pipelines.runner import Pipeline, RunContext
from pipelines.steps.persist_connections import PersistConnections
from pipelines.steps.validate_connections import ValidateConnections
from services.connections_service import ConnectionsService
from services.errors import BadRequest, ConnectionServiceError
from utils.logging_setup import init_logging


def _print_json(data) -> None:
	print(json.dumps(data, indent=2, ensure_ascii=False))


def _service(args) -> ConnectionsService:
	conn = get_connection(args.db)
	schema.bootstrap(conn)
	return ConnectionsService(ConnectionsRepo(conn))


def _fields_from_args(args) -> dict:
	payload = {}
	for field in ("email", "name", "linkedin_url"):
		value = getattr(args, field, None)
		if value is not None:
			payload[field] = value
	return payload


def cmd_bootstrap(args):
	conn = get_connection(args.db)
	schema.bootstrap(conn)
	print("Schema ready")


def cmd_add(args):
	created = _service(args).create_connection(args.owner, _fields_from_args(args))
	_print_json({"data": created.model_dump()})


def cmd_show(args):
	found = _service(args).get_connection(args.owner, args.id)
	_print_json({"data": found.model_dump()})


def cmd_list(args):
	page = _service(args).list_connections(args.owner, search=args.search, limit=args.limit, cursor=args.cursor)
	_print_json(page.model_dump())


def cmd_update(args):
	updated = _service(args).update_connection(args.owner, args.id, _fields_from_args(args))
	_print_json({"data": updated.model_dump()})


def cmd_delete(args):
	_service(args).delete_connection(args.owner, args.id)
	print(f"Deleted {args.id}")


def cmd_stats(args):
	_print_json(_service(args).connection_stats(args.owner))


def cmd_import(args):
	try:
		data = json.loads(Path(args.input).read_text(encoding="utf-8"))
	except OSError as e:
		raise BadRequest(f"Cannot read input file: {args.input}") from e
	except ValueError as e:
		raise BadRequest(f"Input file is not valid JSON: {e}") from e
	records = data.get("connections") if isinstance(data, dict) else data
	if not isinstance(records, list):
		raise BadRequest("Input must be a JSON array or an object with a 'connections' array")
	if not os.getenv("RUN_ID"):
		os.environ["RUN_ID"] = _uuid.uuid4().hex
	ctx = RunContext(owner_email=args.owner, records=list(records))
	pipeline = Pipeline([
		ValidateConnections(),
		PersistConnections(_service(args)),
	])
	ctx = pipeline.run(ctx)
	_print_json({
		"processed": int(ctx.meta.get("processed_connections") or 0),
		"skipped_duplicates": int(ctx.meta.get("skipped_duplicates") or 0),
		"duplicates_in_batch": int(ctx.meta.get("duplicates_in_batch") or 0),
		"rejected": ctx.meta.get("rejected") or [],
	})


def cmd_validate(args):
	outcome = validate_connection(_fields_from_args(args))
	_print_json({
		"is_valid": outcome.is_valid,
		"errors": outcome.errors,
		"error_kinds": {k: v.value for k, v in outcome.error_kinds.items()},
		"normalized": outcome.normalized.model_dump(),
	})
	if not outcome.is_valid:
		sys.exit(1)


def _add_field_args(p, email_required: bool = False) -> None:
	p.add_argument("--email", required=email_required, help="Contact email")
	p.add_argument("--name", help="Display name")
	p.add_argument("--linkedin-url", dest="linkedin_url", help="https://www.linkedin.com/... profile URL")


def main():
	settings = get_settings()
	init_logging(settings.log_level)
	parser = argparse.ArgumentParser(description="ReachPilot connections CLI")
	parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
	parser.add_argument("--owner", default=settings.owner_email, help="Signed-in user's email (default: OWNER_EMAIL)")
	sub = parser.add_subparsers(dest="cmd", required=True)

	p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
	p_boot.set_defaults(func=cmd_bootstrap)

	p_add = sub.add_parser("add", help="Create a connection")
	_add_field_args(p_add, email_required=True)
	p_add.set_defaults(func=cmd_add)

	p_show = sub.add_parser("show", help="Show one connection")
	p_show.add_argument("id", help="Connection id")
	p_show.set_defaults(func=cmd_show)

	p_list = sub.add_parser("list", help="List connections, newest first")
	p_list.add_argument("--search", default="", help="Substring match on email or name")
	p_list.add_argument("--limit", default=None, help=f"Page size (default {settings.default_page_size}, max {settings.max_page_size})")
	p_list.add_argument("--cursor", default=None, help="next_cursor from a previous page")
	p_list.set_defaults(func=cmd_list)

	p_upd = sub.add_parser("update", help="Update fields of a connection")
	p_upd.add_argument("id", help="Connection id")
	_add_field_args(p_upd)
	p_upd.set_defaults(func=cmd_update)

	p_del = sub.add_parser("delete", help="Delete a connection")
	p_del.add_argument("id", help="Connection id")
	p_del.set_defaults(func=cmd_delete)

	p_stats = sub.add_parser("stats", help="Totals for the dashboard")
	p_stats.set_defaults(func=cmd_stats)

	p_imp = sub.add_parser("import", help="Bulk import connections from JSON")
	p_imp.add_argument("--input", required=True, help="Path to JSON file (array or {\"connections\": [...]})")
	p_imp.set_defaults(func=cmd_import)

	p_val = sub.add_parser("validate", help="Check and normalize fields without saving")
	_add_field_args(p_val)
	p_val.set_defaults(func=cmd_validate)

	args = parser.parse_args()
	try:
		args.func(args)
	except ConnectionServiceError as e:
		logging.debug(f"{args.cmd} failed: {e.code}", extra={"step": args.cmd, "status": e.status})
		_print_json(e.to_dict())
		sys.exit(1)


if __name__ == "__main__":
	main()
