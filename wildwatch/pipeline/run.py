from __future__ import annotations

import argparse
import asyncio
import logging
import time
from pathlib import Path

from wildwatch.common.config import AppConfig, load_config
from wildwatch.common.logging import configure_logging
from wildwatch.controller.factory import create_controller
from wildwatch.controller.loop import DetectionLoopController
from wildwatch.controller.state import RunState
from wildwatch.detection.base import StopProcessing
from wildwatch.detection.visualizer import PreviewWindow

logger = logging.getLogger(__name__)


async def run_session(
    controller: DetectionLoopController,
    preview: PreviewWindow | None = None,
    max_frames: int | None = None,
    duration: float | None = None,
    poll_interval: float = 0.05,
) -> int:
    """Bootstrap, start detecting and follow the controller until a limit is hit.

    Returns the number of frames published during the session.
    """
    started = time.monotonic()
    # The temperature fetch keeps running in the background once the camera is ready.
    bootstrap = asyncio.create_task(controller.bootstrap())
    try:
        while controller.snapshot.is_loading and not bootstrap.done():
            await asyncio.sleep(poll_interval)
        if bootstrap.done():
            bootstrap.result()
        snapshot = controller.snapshot
        if snapshot.run_state is RunState.FAILED:
            logger.error("Session failed: %s", snapshot.failure_reason)
            return 0
        controller.toggle()
        while not controller.closed:
            await asyncio.sleep(poll_interval)
            snapshot = controller.snapshot
            if preview is not None and snapshot.annotated_frame is not None:
                if preview.show(snapshot.annotated_frame, snapshot.alert):
                    controller.toggle()
            if max_frames is not None and snapshot.frame_index >= max_frames:
                break
            if duration is not None and time.monotonic() - started >= duration:
                break
            if snapshot.run_state is RunState.READY and snapshot.last_error:
                logger.error("Detection stopped: %s", snapshot.last_error)
                break
        return controller.snapshot.frame_index
    except StopProcessing:
        logger.info("Session stopped by user")
        return controller.snapshot.frame_index
    finally:
        controller.close()
        if not bootstrap.done():
            bootstrap.cancel()
        await controller.scheduler.drain()
        if preview is not None:
            preview.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the wild animal detection loop")
    parser.add_argument("--config", default="config.yaml", help="Path to config YAML")
    parser.add_argument("--preview", action="store_true", help="Show an OpenCV preview window")
    parser.add_argument(
        "--preview-width", type=int, default=None, help="Resize the preview to this width"
    )
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after N frames")
    parser.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
    args = parser.parse_args()

    try:
        config_path = args.config
        if Path(config_path).exists():
            config = load_config(config_path)
        else:
            logger.warning("Config %s not found; using defaults", config_path)
            config = AppConfig()
        configure_logging(config.data_paths.logs_dir)

        preview = PreviewWindow(display_resize_width=args.preview_width) if args.preview else None
        controller = create_controller(config)
        frames = asyncio.run(
            run_session(
                controller,
                preview=preview,
                max_frames=args.max_frames,
                duration=args.duration,
            )
        )
        logger.info("Processed %s frames", frames)
        return 1 if controller.snapshot.run_state is RunState.FAILED else 0
    except Exception:
        logger.exception("Detection session failed", extra={"config": args.config})
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
