from __future__ import annotations
import argparse, logging
from datetime import timedelta
import orjson
import uvicorn

from request_analytics.config import settings
from request_analytics.errors import StoreInitError
from request_analytics.logging_setup import setup_logging
from request_analytics.report import chart_data
from request_analytics.retention import prune
from request_analytics.store import RequestStore

logger = logging.getLogger("request_analytics.cli")

def _open_store(db_path: str) -> RequestStore:
    store = RequestStore(db_path)
    try:
        store.open()
    except StoreInitError as e:
        logger.error("%s", e)
        raise SystemExit(1)
    return store

def cmd_serve(args):
    from request_analytics.api import create_app
    from request_analytics.service import AnalyticsService

    s = settings.model_copy(update={"db_path": args.db_path})
    service = AnalyticsService(s)
    try:
        service.open()
    except StoreInitError as e:
        logger.error("%s", e)
        raise SystemExit(1)
    uvicorn.run(create_app(service), host=args.host, port=args.port, reload=False)

def cmd_report(args):
    store = _open_store(args.db_path)
    try:
        data = chart_data(store, days=args.days)
    finally:
        store.close()
    print(orjson.dumps(data.as_dict(), option=orjson.OPT_INDENT_2).decode("utf-8"))

def cmd_prune(args):
    store = _open_store(args.db_path)
    try:
        removed = prune(store, timedelta(days=args.days))
    finally:
        store.close()
    print({"pruned": removed})

def main(argv=None):
    p = argparse.ArgumentParser(prog="request-analytics")
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("serve")
    s.add_argument("--db-path", default=settings.db_path)
    s.add_argument("--host", default="0.0.0.0")
    s.add_argument("--port", type=int, default=8000)
    s.set_defaults(fn=cmd_serve)

    r = sub.add_parser("report")
    r.add_argument("--db-path", default=settings.db_path)
    r.add_argument("--days", type=int, default=settings.report_days)
    r.set_defaults(fn=cmd_report)

    pr = sub.add_parser("prune")
    pr.add_argument("--db-path", default=settings.db_path)
    pr.add_argument("--days", type=int, default=settings.retention_days)
    pr.set_defaults(fn=cmd_prune)

    args = p.parse_args(argv)
    setup_logging(args.log_level)
    args.fn(args)

if __name__ == "__main__":
    main()
