"""
Query country case and death statistics from CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from app.schemas.covid_stats import catalog_response, comparison_response, entity_detail_response
from app.services.covid_stats_service import CovidStatsService, create_default_covid_stats_service
from db.session import SessionLocal
from epistats.errors import ComparisonFailure, EpistatsError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query COVID-19 case and death statistics.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    catalog = subparsers.add_parser("catalog", help="List countries reporting on one date.")
    catalog.add_argument("--date", required=True, help="Snapshot date, YYYY-MM-DD.")
    catalog.add_argument("--country", default=None, help="Optional country search.")
    catalog.add_argument("--limit", type=int, default=None, help="Maximum number of entries.")

    regions = subparsers.add_parser("regions", help="List the regions of one country.")
    regions.add_argument("country")
    regions.add_argument("--limit", type=int, default=None, help="Maximum number of entries.")

    detail = subparsers.add_parser("detail", help="Show the series of one country.")
    detail.add_argument("country")
    detail.add_argument("--region", default=None, help="Narrow to one region.")
    detail.add_argument("--start", default=None, help="Window start, YYYY-MM-DD.")
    detail.add_argument("--end", default=None, help="Window end, YYYY-MM-DD.")

    compare = subparsers.add_parser("compare", help="Compare two countries over one window.")
    compare.add_argument("first")
    compare.add_argument("second")
    compare.add_argument("--start", required=True, help="Window start, YYYY-MM-DD.")
    compare.add_argument("--end", required=True, help="Window end, YYYY-MM-DD.")

    return parser


async def _run(args: argparse.Namespace, service: CovidStatsService) -> dict:
    if args.command == "catalog":
        with SessionLocal() as db:
            catalog, aggregates = await service.get_catalog(
                db,
                date=args.date,
                limit=args.limit,
                country=args.country,
            )
        return catalog_response(catalog, aggregates).model_dump()

    if args.command == "regions":
        catalog = await service.get_regions(args.country, limit=args.limit)
        return catalog_response(catalog).model_dump()

    if args.command == "detail":
        with SessionLocal() as db:
            detail, window = await service.get_detail(
                db,
                args.country,
                region=args.region,
                start_date=args.start,
                end_date=args.end,
            )
        return entity_detail_response(detail, window, start_date=args.start, end_date=args.end).model_dump()

    result = await service.compare(args.first, args.second, args.start, args.end)
    return comparison_response(result.first, result.second, result.start_date, result.end_date).model_dump()


def main() -> int:
    args = _build_parser().parse_args()
    service = create_default_covid_stats_service()

    try:
        payload = asyncio.run(_run(args, service))
    except ComparisonFailure as exc:
        print(json.dumps({"error": str(exc), "failed": list(exc.failed_keys)}, indent=2), file=sys.stderr)
        return 1
    except (EpistatsError, ValueError) as exc:
        print(json.dumps({"error": str(exc)}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
