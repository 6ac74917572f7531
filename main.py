#!/usr/bin/env python3
"""
Main entry point for MeetingMaestro

Runs the API server, the live smoke tests, a one-off time suggestion, or
prints the meetings of a day.
"""

import sys
import json
import logging
from pathlib import Path

# Add the project directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import Config
from src.ai_agent.suggestion_flow import SuggestionFlow, SuggestionFlowError, SuggestionInputError
from src.api.flask_server import MeetingMaestroAPI
from src.notifications.email_sender import LoggingEmailSender
from src.scheduler.day_view import DayView
from src.storage.key_value_storage import create_storage
from src.storage.meeting_store import MeetingStore
from utils.date_utils import parse_date, format_long_date
from utils.logger import MeetingMaestroLogger
from utils.validators import SuggestionRequestValidator

logger = logging.getLogger(__name__)

def suggest_meeting_times(request_data):
    """
    Suggest meeting times for a request in the suggestion-flow format.

    Args:
        request_data (dict): title, description, meetingDuration,
            earliestStart, requiredBy and attendees [{email, availability}]

    Returns:
        dict: suggestedTimes, reasoning and progress

    Raises:
        SuggestionFlowError: when the request is invalid or no validated
            suggestion could be produced
    """
    errors = SuggestionRequestValidator.validate_request_structure(request_data)
    if errors:
        raise SuggestionInputError("Invalid suggestion request", errors)

    flow = SuggestionFlow()
    return flow.suggest(request_data).model_dump()

def run_server(host=None, port=None, debug=False):
    """Run the Flask API server"""
    logger.info("Starting MeetingMaestro...")

    try:
        api = MeetingMaestroAPI()
        api.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise

def run_tests(api_url="http://localhost:5000"):
    """Run live smoke tests against a running server"""
    from tests.test_client import MeetingMaestroTestClient

    logger.info(f"Running tests against {api_url}")

    client = MeetingMaestroTestClient(api_url)
    results = client.run_test_suite()

    # Print results
    summary = results["summary"]
    print(f"\nTest Results:")
    print(f"  Total: {summary['total']}")
    print(f"  Passed: {summary['passed']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Success rate: {(summary['passed']/summary['total']*100) if summary['total'] > 0 else 0:.1f}%")
    print(f"  Avg response time: {summary['avg_response_time']:.2f}s")

    return results

def show_day(date_value, send_email=False):
    """Print the meetings of a day, optionally emailing their participants"""
    day = parse_date(date_value)
    store = MeetingStore(create_storage(Config.STORAGE_PATH))
    day_view = DayView(store)

    meetings = day_view.meetings_for_date(day)
    if meetings:
        print(day_view.format_meetings_text(day, meetings), end="")
    else:
        print(f"No meetings scheduled for {format_long_date(day)}.")

    if send_email:
        report = day_view.send_email_for_date(day, LoggingEmailSender())
        for notification in report.notifications:
            print(f"[{notification.variant}] {notification.title} {notification.description}")
        return 1 if report.blocked or report.failed else 0

    return 0

def main():
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='MeetingMaestro')
    parser.add_argument('--log-level', default='INFO', help='Logging level')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Server command
    server_parser = subparsers.add_parser('server', help='Run API server')
    server_parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')
    server_parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    # Test command
    test_parser = subparsers.add_parser('test', help='Run smoke tests against a running server')
    test_parser.add_argument('--url', default='http://localhost:5000', help='API URL to test')

    # Suggest command (for a single request)
    suggest_parser = subparsers.add_parser('suggest', help='Suggest meeting times for a request file')
    suggest_parser.add_argument('input_file', help='Input JSON file')
    suggest_parser.add_argument('--output', help='Output JSON file')

    # Day command
    day_parser = subparsers.add_parser('day', help='Show the meetings of a day')
    day_parser.add_argument('date', help='Date as YYYY-MM-DD')
    day_parser.add_argument('--email', action='store_true', help='Email the participants of every meeting')

    args = parser.parse_args()
    MeetingMaestroLogger.setup_logging(log_level=args.log_level)

    if args.command == 'server':
        run_server(host=args.host, port=args.port, debug=args.debug)

    elif args.command == 'test':
        results = run_tests(api_url=args.url)
        return 0 if results["summary"]["failed"] == 0 else 1

    elif args.command == 'suggest':
        with open(args.input_file, 'r') as f:
            request_data = json.load(f)

        try:
            result = suggest_meeting_times(request_data)
        except SuggestionInputError as e:
            print(f"{e}:", file=sys.stderr)
            for error in e.errors:
                print(f"  - {error}", file=sys.stderr)
            return 2
        except SuggestionFlowError as e:
            print(f"Failed to suggest meeting times: {e}", file=sys.stderr)
            return 1

        if args.output:
            with open(args.output, 'w') as f:
                json.dump(result, f, indent=2)
        else:
            print(json.dumps(result, indent=2))

    elif args.command == 'day':
        try:
            return show_day(args.date, send_email=args.email)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            return 2

    else:
        parser.print_help()

    return 0

if __name__ == '__main__':
    sys.exit(main())
