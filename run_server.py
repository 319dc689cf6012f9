"""
Runner for the practice backend: the REST API and the real-time relay.

The Flask app serves HTTP on one port; the WebSocket relay runs on its own
thread and port and shares the app's hub, so results posted over HTTP are
broadcast to every connected client.
"""
import argparse
import logging
import os

from api.realtime import RealtimeServer
from app import create_app
from helpers.debug_util import DebugUtil

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger("PracticeServerRunner")


def main() -> None:
    """Parse command line arguments and run the backend."""
    parser = argparse.ArgumentParser(description="Run the typing practice backend")
    parser.add_argument("--host", default=os.environ.get("HOST", "127.0.0.1"), help="Interface to bind")
    parser.add_argument(
        "--port", type=int, default=int(os.environ.get("PORT", 5000)), help="HTTP port for the REST API"
    )
    parser.add_argument("--ws-port", type=int, default=8765, help="Port of the WebSocket relay")
    parser.add_argument(
        "--debug-mode",
        choices=["quiet", "loud"],
        default=None,
        help="Debug output mode (defaults to TYPING_PRACTICE_DEBUG_MODE)",
    )
    args = parser.parse_args()

    debug_util = DebugUtil(args.debug_mode)
    if debug_util.is_loud():
        logging.getLogger().setLevel(logging.DEBUG)

    app = create_app()
    realtime = RealtimeServer(app.config["REALTIME_HUB"], host=args.host, port=args.ws_port)
    realtime.start()

    debug_util.debugMessage(f"Leaderboard size: {app.config['LEADERBOARD_SIZE']}")
    logger.info("Health check: http://%s:%s/api/health", args.host, args.port)
    try:
        app.run(host=args.host, port=args.port, threaded=True)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        realtime.stop()


if __name__ == "__main__":
    main()
