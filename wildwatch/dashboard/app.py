from __future__ import annotations

import argparse
import atexit
import logging
import os
import sys

import streamlit as st

from wildwatch.common.config import AppConfig, load_config
from wildwatch.common.logging import configure_logging
from wildwatch.controller.factory import create_controller
from wildwatch.controller.loop import Snapshot
from wildwatch.dashboard.session import BackgroundSession
from wildwatch.dashboard.views import (
    EMPTY_TABLE_MESSAGE,
    detection_table,
    status_banners,
    temperature_label,
    toggle_disabled,
    toggle_label,
)

logger = logging.getLogger(__name__)

REFRESH_SECONDS = 0.2


def _is_running_with_streamlit() -> bool:
    try:
        from streamlit.runtime.scriptrunner import get_script_run_ctx

        return get_script_run_ctx() is not None
    except Exception:
        return False


def _run_streamlit() -> int:
    from streamlit.web.cli import main as stcli

    sys.argv = ["streamlit", "run", __file__, "--"] + sys.argv[1:]
    try:
        return int(stcli() or 0)
    except SystemExit as exc:
        return int(exc.code or 0)


def _get_config_path() -> str:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", default=os.getenv("WILDWATCH_CONFIG", "config.yaml"))
    args, _ = parser.parse_known_args()
    return args.config


def _load_app_config(path: str) -> AppConfig:
    if os.path.exists(path):
        return load_config(path)
    logger.warning("Config %s not found; using defaults", path)
    return AppConfig()


@st.cache_resource
def get_session(config_path: str) -> BackgroundSession:
    config = _load_app_config(config_path)
    configure_logging(config.data_paths.logs_dir)
    session = BackgroundSession(create_controller(config))
    session.start()
    # Release the camera when the server process exits.
    atexit.register(session.close)
    return session


def _render_banners(snapshot: Snapshot) -> None:
    for kind, text in status_banners(snapshot):
        if kind == "info":
            st.info(text)
        elif kind == "warning":
            st.warning(text)
        else:
            st.error(text)


@st.fragment(run_every=REFRESH_SECONDS)
def live_panel(session: BackgroundSession) -> None:
    snapshot = session.snapshot
    video_col, side_col = st.columns(2)
    with video_col:
        if snapshot.annotated_frame is not None:
            st.image(snapshot.annotated_frame, channels="BGR", use_container_width=True)
        else:
            st.caption("Waiting for camera...")
    with side_col:
        st.subheader(f"Animal Temperature: {temperature_label(snapshot.temperature)} °C")
        if st.button(
            toggle_label(snapshot),
            key="toggle_detection",
            disabled=toggle_disabled(snapshot),
            type="primary",
        ):
            session.toggle()
            st.rerun(scope="fragment")
        _render_banners(snapshot)
        if not snapshot.detections:
            st.write(EMPTY_TABLE_MESSAGE)
            return
        st.markdown("#### View Results")
        st.dataframe(
            detection_table(snapshot.detections),
            hide_index=True,
            use_container_width=True,
        )


def main() -> int:
    try:
        if not _is_running_with_streamlit():
            return _run_streamlit()
        st.set_page_config(page_title="Animal Health Monitoring", layout="wide")
        session = get_session(_get_config_path())

        st.title("Animal Health Monitoring")
        live_panel(session)
        return 0
    except Exception:
        logger.exception("Dashboard failed", extra={"config": _get_config_path()})
        return 1


if __name__ == "__main__":
    if _is_running_with_streamlit():
        main()
    else:
        raise SystemExit(main())
