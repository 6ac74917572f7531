"""
Flask API server for MeetingMaestro
"""
import logging
import signal
import sys
import time
from datetime import datetime
from threading import Thread

from flask import Flask, request, jsonify, g
from flask_cors import CORS

from config.settings import Config
from src.ai_agent.suggestion_flow import SuggestionFlow, SuggestionFlowError, SuggestionInputError
from src.notifications.clipboard import BufferClipboard
from src.notifications.email_sender import LoggingEmailSender
from src.scheduler.day_view import DayView
from src.scheduler.slot_assignment import SlotPicker
from src.storage.key_value_storage import create_storage
from src.storage.meeting_store import MeetingStore, MeetingStoreError
from utils.date_utils import parse_date
from utils.logger import MeetingMaestroLogger
from utils.notifications import Notification, RETRY_HINT
from utils.validators import SuggestionRequestValidator

logger = logging.getLogger(__name__)

class MeetingMaestroAPI:
    """
    Flask API server wiring the meeting store, slot picker, day view and
    suggestion flow together
    """

    def __init__(self, store: MeetingStore = None, llm_client=None, email_sender=None,
                 config: Config = None):
        self.config = config or Config()
        self.app = Flask(__name__)
        CORS(self.app)  # Enable CORS for the browser front end

        self.store = store or MeetingStore(create_storage(self.config.STORAGE_PATH), self.config.STORAGE_KEY)
        self.slot_picker = SlotPicker(self.store, self.config)
        self.day_view = DayView(self.store)
        self.email_sender = email_sender or LoggingEmailSender()

        # The suggestion flow is optional: the rest of the app works without it
        try:
            self.suggestion_flow = SuggestionFlow(llm_client, self.config)
            logger.info("SuggestionFlow initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize SuggestionFlow: {e}")
            self.suggestion_flow = None

        self.requests_processed = 0
        self.start_time = time.time()

        # Setup routes
        self._setup_routes()

    @staticmethod
    def _json_body():
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else None

    @staticmethod
    def _bad_date(value):
        return jsonify({
            "error": f"Invalid date: {value}. Expected: YYYY-MM-DD",
            "notification": Notification.error("No date selected", "Please select a valid date.").to_dict()
        }), 400

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.before_request
        def start_timer():
            g.request_start = time.time()

        @self.app.after_request
        def log_request(response):
            self.requests_processed += 1
            if request.path.startswith('/api/'):
                processing_time = time.time() - g.get('request_start', time.time())
                MeetingMaestroLogger.log_request_response(
                    f"{request.method} {request.path}",
                    request.get_json(silent=True) if request.is_json else None,
                    response.get_json(silent=True) if response.is_json else None,
                    response.status_code,
                    processing_time
                )
            return response

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "suggestions_available": self.suggestion_flow is not None
            })

        @self.app.route('/status', methods=['GET'])
        def get_status():
            """Get server status and statistics"""
            return jsonify({
                "status": "running",
                "requests_processed": self.requests_processed,
                "uptime": time.time() - self.start_time,
                "meetings_stored": len(self.store.load_all()),
                "store_version": self.store.version()
            })

        @self.app.route('/api/slots', methods=['GET'])
        def get_slots():
            """Time slot catalogue for a date, occupied slots marked unavailable"""
            value = request.args.get('date') or datetime.now().date().isoformat()
            try:
                day = parse_date(value)
            except ValueError:
                return self._bad_date(value)

            slots = self.slot_picker.slots_for_date(day)
            return jsonify({
                "date": day.isoformat(),
                "slots": [slot.to_dict() for slot in slots],
                "defaults": self.slot_picker.default_form(day),
                "availableParticipants": self.config.AVAILABLE_PARTICIPANTS
            })

        @self.app.route('/api/meetings', methods=['POST'])
        def select_slot():
            """Commit the meeting form by picking a time slot"""
            data = self._json_body()
            if data is None:
                logger.error("No JSON data received")
                return jsonify({"error": "No JSON data provided"}), 400

            selection = self.slot_picker.select_slot(data, data.get('time'))

            if selection.accepted:
                return jsonify(selection.to_dict()), 201
            if selection.occupied:
                return jsonify(selection.to_dict()), 409
            if selection.errors:
                return jsonify(selection.to_dict()), 400
            return jsonify(selection.to_dict()), 500

        @self.app.route('/api/meetings', methods=['GET'])
        def list_meetings():
            meetings = self.store.load_all()
            return jsonify({
                "version": self.store.version(),
                "meetings": [meeting.to_dict() for meeting in meetings]
            })

        @self.app.route('/api/meetings', methods=['DELETE'])
        def clear_meetings():
            try:
                self.store.clear()
            except MeetingStoreError as e:
                logger.error(f"Failed to clear meetings: {e}")
                return jsonify({
                    "notification": Notification.error("Failed to clear meetings.", RETRY_HINT).to_dict()
                }), 500
            return jsonify({
                "notification": Notification.info("Meetings cleared.", "All stored meetings were removed.").to_dict()
            })

        @self.app.route('/api/meetings/<meeting_id>', methods=['GET'])
        def get_meeting(meeting_id):
            meeting = self.store.get(meeting_id)
            if meeting is None:
                return jsonify({"error": "Meeting not found"}), 404
            return jsonify(meeting.to_dict())

        @self.app.route('/api/meetings/<meeting_id>', methods=['DELETE'])
        def delete_meeting(meeting_id):
            try:
                deleted = self.store.delete(meeting_id)
            except MeetingStoreError as e:
                logger.error(f"Failed to delete meeting {meeting_id}: {e}")
                return jsonify({
                    "notification": Notification.error("Failed to delete meeting.", RETRY_HINT).to_dict()
                }), 500

            if not deleted:
                return jsonify({"error": "Meeting not found"}), 404
            return jsonify({
                "notification": Notification.info("Meeting deleted.", "The meeting was removed.").to_dict()
            })

        @self.app.route('/api/meeting-dates', methods=['GET'])
        def get_meeting_dates():
            return jsonify({"dates": [day.isoformat() for day in self.day_view.meeting_dates()]})

        @self.app.route('/api/days/<date_value>', methods=['GET'])
        def get_day(date_value):
            """Meetings of one day in time order"""
            try:
                day = parse_date(date_value)
            except ValueError:
                return self._bad_date(date_value)

            return jsonify({
                "date": day.isoformat(),
                "meetings": self.day_view.entries_for_date(day)
            })

        @self.app.route('/api/days/<date_value>/copy', methods=['POST'])
        def copy_day(date_value):
            """Text summary of the day's meetings for the browser to copy"""
            try:
                day = parse_date(date_value)
            except ValueError:
                return self._bad_date(date_value)

            result = self.day_view.copy_all(day, BufferClipboard())
            return jsonify(result.to_dict()), (200 if result.copied else 400)

        @self.app.route('/api/days/<date_value>/email', methods=['POST'])
        def email_day(date_value):
            """Email the participants of every meeting of the day"""
            try:
                day = parse_date(date_value)
            except ValueError:
                return self._bad_date(date_value)

            report = self.day_view.send_email_for_date(day, self.email_sender)
            status = 400 if report.blocked else 200
            return jsonify(report.to_dict()), status

        @self.app.route('/api/suggestions', methods=['POST'])
        def suggest_times():
            """Ask the language model for candidate meeting times"""
            data = self._json_body()
            if data is None:
                logger.error("No JSON data received")
                return jsonify({"error": "No JSON data provided"}), 400

            errors = SuggestionRequestValidator.validate_request_structure(data)
            if errors:
                return jsonify({
                    "errors": errors,
                    "notification": Notification.error("Error", errors[0]).to_dict()
                }), 400

            if self.suggestion_flow is None:
                logger.error("Suggestion flow not available")
                return jsonify({
                    "error": "Suggestion service not initialized",
                    "notification": Notification.error(
                        "Error", f"Failed to suggest meeting times. {RETRY_HINT}"
                    ).to_dict()
                }), 503

            try:
                output = self.suggestion_flow.suggest(data)
            except SuggestionInputError as e:
                return jsonify({
                    "errors": e.errors,
                    "notification": Notification.error("Error", str(e)).to_dict()
                }), 400
            except SuggestionFlowError as e:
                logger.error(f"Error suggesting meeting times: {e}")
                return jsonify({
                    "error": str(e),
                    "notification": Notification.error(
                        "Error", f"Failed to suggest meeting times. {RETRY_HINT}"
                    ).to_dict()
                }), 502

            return jsonify(output.model_dump())

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({"error": "Endpoint not found"}), 404

        @self.app.errorhandler(405)
        def method_not_allowed(error):
            return jsonify({"error": "Method not allowed"}), 405

        @self.app.errorhandler(500)
        def internal_error(error):
            return jsonify({"error": "Internal server error"}), 500

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False, handle_signals=True):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        if handle_signals:
            self._setup_signal_handlers()
        self.start_time = time.time()

        logger.info(f"Starting MeetingMaestro API server on {host}:{port}")
        logger.info(f"Meeting storage: {self.store.storage!r}")
        logger.info(f"Suggestion flow: {'Available' if self.suggestion_flow else 'Not Available'}")

        try:
            self.app.run(
                host=host,
                port=port,
                debug=debug,
                threaded=False,  # the store assumes a single writer
                use_reloader=False
            )
        except Exception as e:
            logger.error(f"Failed to start server: {e}")
            raise

    def run_background(self, host=None, port=None):
        """Run the Flask server in background thread"""
        def run_server():
            self.run(host, port, debug=False, handle_signals=False)

        server_thread = Thread(target=run_server, daemon=True)
        server_thread.start()
        logger.info("Flask server started in background")
        return server_thread

    def shutdown(self):
        """Graceful shutdown"""
        logger.info("Shutting down MeetingMaestro API server...")

def create_app(config: Config = None, **kwargs) -> Flask:
    """Factory function to create Flask app"""
    api = MeetingMaestroAPI(config=config, **kwargs)
    return api.app

def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='MeetingMaestro API Server')
    parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    MeetingMaestroLogger.setup_logging(log_level="DEBUG" if args.debug else "INFO")
    api = MeetingMaestroAPI()
    api.run(host=args.host, port=args.port, debug=args.debug)

if __name__ == '__main__':
    main()
