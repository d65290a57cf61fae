"""
Reservoir Insights — AI insights for Kenya's water reservoirs.

Application entry point.

Usage:
    python app.py insight "Which counties need rationing?" --type RECOMMENDATION
    python app.py predict 3 --days 14
    python app.py critical

Requires INFLECTION_API_KEY, INFLECTION_API_ENDPOINT and RESERVOIRS_FILE
(environment or .env).
"""

import argparse
import logging
import sys

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
    datefmt='%H:%M:%S',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)

# Less noise from libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reservoir-insights", description="AI insights for water reservoirs")
    commands = parser.add_subparsers(dest="command", required=True)

    insight = commands.add_parser("insight", help="ask a free-text question")
    insight.add_argument("query")
    insight.add_argument("--context", default=None)
    insight.add_argument("--type", dest="analysis_type", default=None,
                         help="PREDICTION, RECOMMENDATION, ANALYSIS or GENERAL")

    predict = commands.add_parser("predict", help="forecast levels for one reservoir")
    predict.add_argument("reservoir_id", type=int)
    predict.add_argument("--days", type=int, default=7)

    commands.add_parser("critical", help="recommendations for critical reservoirs")

    return parser


def main(argv=None) -> int:
    """Runs one operation and prints the result as JSON."""
    from pydantic import ValidationError

    from config import load_settings
    from core import InsightService
    from data import InsightRequest, TableReservoirProvider

    args = build_parser().parse_args(argv)

    settings, inflection = load_settings()
    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if settings.reservoirs_file is None:
        logger.error("RESERVOIRS_FILE is not set")
        return 2

    provider = TableReservoirProvider.from_file(settings.reservoirs_file, settings.critical_threshold_pct)
    service = InsightService.from_settings(inflection, provider, settings)

    if args.command == "insight":
        try:
            request = InsightRequest(query=args.query, context=args.context, analysis_type=args.analysis_type)
        except ValidationError as e:
            logger.error(f"Invalid request: {e}")
            return 2
        result = service.get_insight(request)
    elif args.command == "predict":
        result = service.predict_water_levels(args.reservoir_id, args.days)
    else:
        result = service.get_critical_reservoir_recommendations()

    print(result.model_dump_json(by_alias=True, indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
