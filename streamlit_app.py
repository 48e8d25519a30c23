from __future__ import annotations

# CIVIC ISSUES REPORTER (Streamlit front end)
#
# Purpose:
# - Public feed of reported issues + login / sign-up
# - Citizen dashboard: report issues with photo and location, track own reports
# - Admin dashboard: triage every issue and move it through its lifecycle
#
# Design notes:
# - The REST API is the single source of truth. Every action is one request,
#   followed by a full re-fetch of the list on screen (no local patching).
# - Streamlit reruns the script on every interaction → cache the config and
#   the HTTP client, keep page state in per-route controllers.
# - The route lives in the `page` query parameter, so redirects are URL changes.

# ============================================================================
# IMPORTS
# ============================================================================
import logging
from datetime import datetime

import streamlit as st

from civic_frontend.api import ApiClient
from civic_frontend.config import AppConfig, get_config
from civic_frontend.pages import (
    current_route,
    mirror_browser_session,
    page_admin,
    page_citizen,
    page_public,
    restore_browser_session,
)
from civic_frontend.session import ROUTE_ADMIN, ROUTE_CITIZEN, ROUTE_PUBLIC, SessionStore

# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================
# Streamlit reruns can re-add handlers; guard to avoid duplicated log lines.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logging.basicConfig(level=logging.INFO)


@st.cache_resource
def get_api_client(_config: AppConfig) -> ApiClient:
    """One HTTP session per process (keeps connections alive across reruns)."""
    logger.info("Using API at %s", _config.api_base)
    return ApiClient(_config.api_base, timeout=_config.request_timeout)


# ============================================================================
# MAIN APPLICATION
# ============================================================================
def main() -> None:
    """App entry point (routing + one-time initialization)."""
    st.set_page_config(
        page_title="Civic Issues Reporter",
        page_icon="📍",
        layout="centered",
        initial_sidebar_state="expanded",
    )

    config = get_config()
    api = get_api_client(config)
    store = SessionStore(st.session_state)
    restore_browser_session(store)

    page_functions = {
        ROUTE_PUBLIC: lambda: page_public(api, store, config),
        ROUTE_CITIZEN: lambda: page_citizen(api, store, config),
        ROUTE_ADMIN: lambda: page_admin(api, store, config),
    }
    page_functions[current_route()]()
    mirror_browser_session(store)

    st.sidebar.markdown("---")
    st.sidebar.caption(f"© {datetime.now().year} Civic Issues Reporter")


# ============================================================================
# APPLICATION ENTRY POINT
# ============================================================================
def run() -> None:
    """Run the app behind a crash guard that always leaves a readable page."""
    try:
        main()
    except Exception as e:
        # st.rerun() and st.stop() raise control-flow exceptions that are not
        # Exception subclasses, so they pass through untouched.
        logger.critical("Application crashed: %s", e, exc_info=True)

        st.error(
            "⚠️ **Application Error**\n\n"
            "The application encountered an unexpected error. Try:\n"
            "1) Refresh the page\n"
            "2) Check your internet connection\n"
            "3) Contact support if the problem persists"
        )

        try:
            if get_config().debug:
                import traceback

                st.code(traceback.format_exc(), language="python")
        except Exception:
            # The config itself may be what failed.
            pass


if __name__ == "__main__":
    run()
