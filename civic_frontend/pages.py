from __future__ import annotations

# ============================================================================
# STREAMLIT PAGES
# ============================================================================
# Thin drawing layer: every decision lives in the controllers, the pages only
# map widgets to controller calls and controller results to messages.
import hashlib
import json
import logging
from typing import Callable, TypeVar

import streamlit as st
from streamlit_javascript import st_javascript

from .api import ApiClient, ReportImage
from .config import AppConfig
from .controllers import AdminController, CitizenController, PublicController
from .issues import IssueStats, issues_to_frame, status_counts
from .models import ISSUE_CATEGORIES, ROLE_ADMIN, ROLE_CITIZEN, ROLES, STATUS_LEVELS, ActionResult, Session
from .session import ROUTE_ADMIN, ROUTE_CITIZEN, ROUTE_PUBLIC, SessionStore, require_role
from .views import (
    CONTEXT_ADMIN,
    CONTEXT_CITIZEN,
    FEED_CSS,
    render_issue_card,
    render_issue_detail,
    render_issue_feed,
    render_location_status,
)

ROUTES = [ROUTE_PUBLIC, ROUTE_CITIZEN, ROUTE_ADMIN]

# Resolves to {latitude, longitude} or {error}; never rejects.
GEOLOCATION_JS = """
async function getPosition() {
  return await new Promise((resolve) => {
    if (!navigator.geolocation) { resolve({error: "Geolocation is not supported by this browser."}); return; }
    navigator.geolocation.getCurrentPosition(
      (p) => resolve({latitude: p.coords.latitude, longitude: p.coords.longitude}),
      (e) => resolve({error: e.message})
    );
  });
}
getPosition();
"""

READ_SESSION_JS = """
function readSession() {
  return {token: localStorage.getItem("token"), user: localStorage.getItem("user")};
}
readSession();
"""

STORAGE_CHECKED_KEY = "browser_storage_checked"

logger = logging.getLogger(__name__)

C = TypeVar("C")


# ============================================================================
# NAVIGATION & PAGE STATE
# ============================================================================
def current_route() -> str:
    route = st.query_params.get("page", ROUTE_PUBLIC)
    return route if route in ROUTES else ROUTE_PUBLIC


def navigate(route: str) -> None:
    """Redirect: rewrite the page parameter and start a fresh run."""
    st.query_params["page"] = route
    st.rerun()


def page_controller(route: str, factory: Callable[[], C]) -> tuple[C, bool]:
    """Controller for `route`, created on first visit.

    Controllers of other routes are dropped, so state resets on navigation.
    The flag tells the caller the controller is new and needs its first fetch.
    """
    for other in ROUTES:
        if other != route:
            st.session_state.pop(f"{other}_controller", None)

    key = f"{route}_controller"
    created = key not in st.session_state
    if created:
        st.session_state[key] = factory()
    return st.session_state[key], created


# ============================================================================
# BROWSER STORAGE
# ============================================================================
def restore_browser_session(store: SessionStore) -> None:
    """Refill an empty session from localStorage, once per browser session.

    Why:
    - A reload opens a new Streamlit session with empty `st.session_state`.
      Without this the guard would send a signed-in user back to the public
      page.
    - The run stops until the browser answers, so the guard never sees the
      half-loaded state.
    """
    if st.session_state.get(STORAGE_CHECKED_KEY):
        return

    if store.load() is None:
        stored = st_javascript(READ_SESSION_JS, key="read_session")
        # st_javascript yields 0 until the browser answers.
        if stored == 0:
            st.stop()
        if store.restore(stored) is not None:
            logger.info("Session restored from browser storage")

    st.session_state[STORAGE_CHECKED_KEY] = True


def session_storage_js(persisted: dict[str, str] | None) -> str:
    if persisted is None:
        body = 'localStorage.removeItem("token");\n  localStorage.removeItem("user");'
    else:
        body = "\n  ".join(
            f"localStorage.setItem({json.dumps(name)}, {json.dumps(value)});" for name, value in persisted.items()
        )
    return f"function writeSession() {{\n  {body}\n  return true;\n}}\nwriteSession();\n"


def mirror_browser_session(store: SessionStore) -> None:
    """Write the current session (or its absence) through to localStorage."""
    persisted = store.persisted()
    digest = hashlib.sha256(json.dumps(persisted, sort_keys=True).encode("utf-8")).hexdigest()[:16]
    st_javascript(session_storage_js(persisted), key=f"session_mirror_{digest}")


def flash(result: ActionResult) -> None:
    """Keep a message for the next run (a rerun would otherwise swallow it)."""
    if result.message:
        st.session_state["flash"] = (result.ok, result.message)


def show_flash() -> None:
    pending = st.session_state.pop("flash", None)
    if not pending:
        return
    ok, message = pending
    if ok:
        st.toast(message, icon="✅")
    else:
        st.error(message)


def show_stats(stats: IssueStats, *, include_in_progress: bool) -> None:
    labels = [("Total Issues", stats.total), ("Pending", stats.pending)]
    if include_in_progress:
        labels.append(("In Progress", stats.in_progress))
    labels.append(("Resolved", stats.resolved))

    for col, (label, value) in zip(st.columns(len(labels)), labels):
        with col:
            st.metric(label, value)


def show_user_sidebar(session: Session, on_logout: Callable[[], ActionResult]) -> None:
    st.sidebar.markdown(f"### Welcome, {session.user.name}")
    st.sidebar.caption(session.user.email)
    if st.sidebar.button("🚪 Logout", use_container_width=True):
        navigate(on_logout().redirect or ROUTE_PUBLIC)


# ============================================================================
# DETAIL DIALOG
# ============================================================================
@st.dialog("Issue Details", width="large")
def issue_dialog(controller: CitizenController | AdminController, issue_id: str, config: AppConfig) -> None:
    is_admin = isinstance(controller, AdminController)
    issue, result = controller.issue_detail(issue_id)
    if issue is None:
        st.error(result.message)
        return

    st.markdown(render_issue_detail(issue, show_email=is_admin, tz=config.timezone), unsafe_allow_html=True)

    if not is_admin:
        return

    st.subheader("Update Status")
    new_status = st.selectbox(
        "Status",
        STATUS_LEVELS,
        index=STATUS_LEVELS.index(issue.status) if issue.status in STATUS_LEVELS else 0,
        key=f"dialog_status_{issue.id}",
    )
    if st.button("Update Status", type="primary", key=f"dialog_update_{issue.id}"):
        outcome = controller.update_status(issue.id, new_status)
        if outcome is not None:
            flash(outcome)
        st.rerun()


# ============================================================================
# PUBLIC PAGE
# ============================================================================
def page_public(api: ApiClient, store: SessionStore, config: AppConfig) -> None:
    controller, created = page_controller(ROUTE_PUBLIC, lambda: PublicController(api, store))
    if created:
        controller.load()

    st.header("🏙️ Civic Issues Reporter")
    st.caption("Report. Track. Resolve.")
    show_flash()

    login_tab, signup_tab = st.tabs(["🔐 Login", "🆕 Sign Up"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Login", type="primary", use_container_width=True)
        if submitted:
            if not (email and password):
                st.error("Please enter both email and password.")
            else:
                result = controller.login(email.strip(), password)
                if result.ok:
                    flash(result)
                    navigate(result.redirect or ROUTE_PUBLIC)
                st.error(result.message)

    with signup_tab:
        with st.form("signup_form"):
            name = st.text_input("Full Name")
            signup_email = st.text_input("Email", key="signup_email")
            signup_password = st.text_input("Password", type="password", key="signup_password")
            role = st.selectbox("Role", ROLES, format_func=str.title)
            submitted = st.form_submit_button("Sign Up", type="primary", use_container_width=True)
        if submitted:
            if not (name and signup_email and signup_password):
                st.error("Please fill in all fields.")
            else:
                result = controller.signup(name.strip(), signup_email.strip(), signup_password, role)
                if result.ok:
                    flash(result)
                    navigate(result.redirect or ROUTE_PUBLIC)
                st.error(result.message)

    st.divider()
    col_title, col_refresh = st.columns([4, 1])
    with col_title:
        st.subheader("📌 Recently Reported Issues")
    with col_refresh:
        if st.button("Refresh", use_container_width=True):
            controller.load()

    if controller.load_error:
        st.warning(controller.load_error)
    st.markdown(FEED_CSS + controller.feed_markup(config.timezone), unsafe_allow_html=True)


# ============================================================================
# CITIZEN PAGE
# ============================================================================
def _location_capture(controller: CitizenController) -> None:
    """Single-shot geolocation request; the user retries by clicking again."""
    if st.button("📍 Get Current Location"):
        st.session_state["geo_request"] = st.session_state.get("geo_request", 0) + 1

    request_id = st.session_state.get("geo_request", 0)
    if request_id and st.session_state.get("geo_answered") != request_id:
        st.caption("Getting location...")
        fix = st_javascript(GEOLOCATION_JS, key=f"geo_{request_id}")
        # st_javascript yields 0 until the browser answers.
        if fix != 0:
            st.session_state["geo_answered"] = request_id
            controller.capture_location(fix if isinstance(fix, dict) else None)
            st.rerun()

    status = render_location_status(controller.location, controller.location_error)
    if status:
        st.markdown(status, unsafe_allow_html=True)


def _report_form(controller: CitizenController) -> None:
    nonce = st.session_state.get("report_form_nonce", 0)

    st.subheader("📝 Report New Issue")
    _location_capture(controller)

    with st.form(f"report_form_{nonce}"):
        title = st.text_input("Title*", key=f"issue_title_{nonce}")
        description = st.text_area("Description*", key=f"issue_description_{nonce}")
        category = st.selectbox("Category*", ISSUE_CATEGORIES, key=f"issue_category_{nonce}")
        uploaded = st.file_uploader("Photo*", type=["jpg", "jpeg", "png"], key=f"issue_image_{nonce}")
        submitted = st.form_submit_button("🚀 Submit Report", type="primary", use_container_width=True)

    if not submitted:
        return

    if not (title.strip() and description.strip()) or uploaded is None:
        st.error("Please fill in all required fields and attach a photo.")
        return

    image = ReportImage(
        filename=uploaded.name,
        content=uploaded.getvalue(),
        content_type=uploaded.type or "application/octet-stream",
    )
    result = controller.submit_report(title.strip(), description.strip(), category, image)
    if not result.ok:
        st.error(result.message)
        return

    if result.reset_form:
        st.session_state["report_form_nonce"] = nonce + 1
    flash(result)
    st.rerun()


def page_citizen(api: ApiClient, store: SessionStore, config: AppConfig) -> None:
    session = require_role(store, ROLE_CITIZEN)
    if session is None:
        navigate(ROUTE_PUBLIC)

    controller, created = page_controller(ROUTE_CITIZEN, lambda: CitizenController(api, store, session))
    if created:
        controller.refresh()

    show_user_sidebar(session, controller.logout)
    st.header("🏠 My Dashboard")
    show_flash()
    show_stats(controller.stats(), include_in_progress=False)

    with st.expander("➕ Report an Issue", expanded=not controller.issues):
        _report_form(controller)

    st.subheader("📂 My Issues")
    if controller.load_error:
        st.warning(controller.load_error)

    st.markdown(FEED_CSS, unsafe_allow_html=True)
    if not controller.issues:
        st.markdown(render_issue_feed([], CONTEXT_CITIZEN), unsafe_allow_html=True)
        return

    for issue in controller.issues:
        st.markdown(render_issue_card(issue, CONTEXT_CITIZEN, config.timezone), unsafe_allow_html=True)
        if st.button("View Details", key=f"view_{issue.id}"):
            issue_dialog(controller, issue.id, config)


# ============================================================================
# ADMIN PAGE
# ============================================================================
def _on_inline_status_change(controller: AdminController, issue_id: str, current: str, key: str) -> None:
    result = controller.update_status(issue_id, st.session_state.get(key, ""))
    if result is None:
        return
    if not result.ok:
        # Put the selector back on the status the server still holds.
        st.session_state[key] = current
    flash(result)


def _admin_filters(controller: AdminController) -> None:
    col_status, col_category, col_refresh = st.columns([2, 2, 1])
    with col_status:
        status = st.selectbox(
            "Status",
            [""] + STATUS_LEVELS,
            format_func=lambda s: s or "All Statuses",
            key="admin_status_filter",
        )
    with col_category:
        category = st.selectbox(
            "Category",
            [""] + ISSUE_CATEGORIES,
            format_func=lambda c: c or "All Categories",
            key="admin_category_filter",
        )
    with col_refresh:
        st.write(" ")
        if st.button("Refresh", use_container_width=True):
            controller.refresh()
    controller.apply_filter(status, category)


def page_admin(api: ApiClient, store: SessionStore, config: AppConfig) -> None:
    session = require_role(store, ROLE_ADMIN)
    if session is None:
        navigate(ROUTE_PUBLIC)

    controller, created = page_controller(ROUTE_ADMIN, lambda: AdminController(api, store, session))
    if created:
        controller.refresh()

    show_user_sidebar(session, controller.logout)
    st.header("🔧 Admin Dashboard")
    show_flash()
    show_stats(controller.stats(), include_in_progress=True)

    st.subheader("🔍 Filter Issues")
    _admin_filters(controller)

    if controller.load_error:
        st.warning(controller.load_error)

    st.subheader(f"📋 Issues ({len(controller.filtered_issues)})")
    st.markdown(FEED_CSS, unsafe_allow_html=True)
    if not controller.filtered_issues:
        st.markdown(render_issue_feed([], CONTEXT_ADMIN), unsafe_allow_html=True)
    for issue in controller.filtered_issues:
        st.markdown(render_issue_card(issue, CONTEXT_ADMIN, config.timezone), unsafe_allow_html=True)
        col_view, col_status = st.columns([1, 2])
        with col_view:
            if st.button("View Details", key=f"view_{issue.id}"):
                issue_dialog(controller, issue.id, config)
        with col_status:
            if issue.status != "Resolved":
                key = f"inline_status_{issue.id}_{issue.updated_at}"
                st.selectbox(
                    "Update Status",
                    [""] + STATUS_LEVELS,
                    index=(STATUS_LEVELS.index(issue.status) + 1) if issue.status in STATUS_LEVELS else 0,
                    format_func=lambda s: s or "Update Status",
                    key=key,
                    label_visibility="collapsed",
                    on_change=_on_inline_status_change,
                    args=(controller, issue.id, issue.status, key),
                )

    st.subheader("📈 Status Distribution")
    st.bar_chart(status_counts(controller.all_issues))

    st.subheader("💾 Export")
    st.download_button(
        "Download CSV",
        data=issues_to_frame(controller.filtered_issues).to_csv(index=False).encode("utf-8"),
        file_name="issues.csv",
        mime="text/csv",
        use_container_width=True,
    )
