"""
Face Picking Detector - command line entry point
Watches the camera and raises an alert when a fingertip touches the face
"""

import argparse
import logging
import sys
from pathlib import Path

from .camera_utils import MockCamera, initialize_camera
from .config import get_config_manager
from .detector import PickingDetector
from .errors import RegionCatalogError
from .landmark_source import LandmarkSource
from .scheduler import FrameScheduler
from .server import StateWebSocketServer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="face-picking", description="Face Picking Detector")
    parser.add_argument("--camera", type=int, help="Camera index to use")
    parser.add_argument("--mock-camera", action="store_true", help="Use mock camera for CI/testing")
    parser.add_argument("--serve", action="store_true", help="Broadcast picking state over WebSocket")
    parser.add_argument("--port", type=int, help="WebSocket port (default from settings)")
    parser.add_argument("--config", type=Path, help="Path to settings.json")
    parser.add_argument("--max-frames", type=int, help="Stop after reading this many frames")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def log_alert(state) -> None:
    logger.info(f"⚠️  Face picking detected ({state.contact.region if state.contact else 'unknown region'})")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    config = get_config_manager(args.config).load_config()

    try:
        detector = PickingDetector.from_config(config)
    except RegionCatalogError as e:
        logger.error(f"Invalid region configuration: {e}")
        return 1

    logger.info(f"Watching regions: {', '.join(detector.catalog.names)}")
    logger.info(f"Alert cooldown: {config.detection.cooldown_ms:.0f}ms")
    detector.add_alert_hook(log_alert)

    if args.mock_camera:
        logger.info("Using mock camera for CI/testing environment")
        cap = MockCamera(config.camera.width, config.camera.height)
    else:
        camera_index = args.camera if args.camera is not None else config.camera.device_id
        cap = initialize_camera(camera_index=camera_index, width=config.camera.width, height=config.camera.height)
        if cap is None:
            logger.error("Could not open any camera")
            return 1

    try:
        source = LandmarkSource(config.detection, config.models)
    except FileNotFoundError as e:
        logger.error(str(e))
        cap.release()
        return 1

    ws_server = None
    if args.serve or config.server.enabled:
        ws_server = StateWebSocketServer(host=config.server.host, port=args.port or config.server.port)
        ws_server.run_in_thread()
        detector.add_alert_hook(ws_server.publish_alert)

    scheduler = FrameScheduler(
        cap,
        source,
        detector,
        on_state=ws_server.publish_state if ws_server else None,
    )

    try:
        scheduler.run(max_frames=args.max_frames)
    except KeyboardInterrupt:
        logger.info("Detection interrupted")
    finally:
        scheduler.close()
        if ws_server:
            ws_server.shutdown()
        logger.info("Detection service stopped and resources released")

    return 0


if __name__ == "__main__":
    sys.exit(main())
