from __future__ import annotations

import logging
import os

import streamlit as st

from tracker import config
from tracker.constants import CONTACT_METHODS
from tracker.data.api_client import ApiClient
from tracker.data.cache import TTLCache
from tracker.data.repositories import HabitRepository
from tracker.errors import ApiError
from tracker.session import AuthState, FailureReason, SessionManager
from tracker.state import session_slices
from tracker.state.token_store import TokenStore

logger = logging.getLogger(__name__)

ENV_FALLBACK_KEYS = {
    ("app", "API_BASE_URL"): "API_BASE_URL",
}

FAILURE_MESSAGES = {
    FailureReason.INVALID_CREDENTIALS: "Check your email and password and try again.",
    FailureReason.NETWORK_ERROR: "Could not reach the server. Check your connection and retry.",
    FailureReason.SERVER_ERROR: "The server could not complete the request. Try again shortly.",
}


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except Exception:
        # No secrets.toml configured.
        return default
    return current


def get_token_store() -> TokenStore:
    return session_slices.get_resource("token_store", TokenStore)


def _build_session_manager():
    manager = SessionManager(config.api_base_url(), get_token_store())
    manager.load()
    manager.add_listener(_on_state_change)
    return manager


def _on_state_change(old_state, new_state):
    if new_state == AuthState.ANONYMOUS and old_state != AuthState.LOADING:
        logger.info("Session ended (%s -> %s)", old_state.value, new_state.value)
        session_slices.set_value("auth", "signed_out", True)


def get_session_manager() -> SessionManager:
    return session_slices.get_resource("session_manager", _build_session_manager)


def get_repository() -> HabitRepository:
    manager = get_session_manager()
    return session_slices.get_resource(
        "repository",
        lambda: HabitRepository(ApiClient(manager, config.api_base_url())),
    )


def get_cache() -> TTLCache:
    return session_slices.get_resource("user.cache", TTLCache)


def current_profile():
    manager = get_session_manager()
    profile = manager.profile
    if profile:
        return profile
    try:
        profile = get_repository().get_current_user()
    except ApiError as exc:
        # Older accounts may not have a profile row yet.
        logger.warning("Could not load user profile: %s", exc)
        return None
    manager.update_profile(profile)
    return profile


def _after_sign_in(result):
    if result.success:
        session_slices.drop_user_resources()
        current_profile()
        st.rerun()
    st.error(result.message or FAILURE_MESSAGES.get(result.reason, "Sign in failed"))
    if result.reason in FAILURE_MESSAGES:
        st.caption(FAILURE_MESSAGES[result.reason])


def render_login(manager):
    st.markdown("<div class='section-title'>Happy Habits</div>", unsafe_allow_html=True)
    if session_slices.get_value("auth", "signed_out"):
        st.info("Your session expired. Please sign in again.")
    login_tab, register_tab = st.tabs(["Sign in", "Create account"])
    with login_tab:
        with st.form("auth.login_form"):
            email = st.text_input("Email", key="auth.email")
            password = st.text_input("Password", type="password", key="auth.password")
            submitted = st.form_submit_button("Sign in", use_container_width=True)
        if submitted:
            _after_sign_in(manager.login(email.strip(), password))
    with register_tab:
        with st.form("auth.register_form"):
            username = st.text_input("Username", key="auth.reg_username")
            email = st.text_input("Email", key="auth.reg_email")
            phone = st.text_input("Phone", key="auth.reg_phone")
            contact = st.selectbox("Preferred contact", CONTACT_METHODS, key="auth.reg_contact")
            password = st.text_input("Password", type="password", key="auth.reg_password")
            submitted = st.form_submit_button("Create account", use_container_width=True)
        if submitted:
            if not username.strip() or not email.strip() or not password:
                st.warning("Username, email and password are required.")
            else:
                _after_sign_in(manager.register(username.strip(), password, email.strip(), phone.strip() or None, contact))


def enforce_login():
    manager = get_session_manager()
    if not manager.is_authenticated:
        render_login(manager)
        st.stop()
    session_slices.set_value("auth", "signed_out", False)
    return manager


def logout():
    manager = get_session_manager()
    manager.logout()
    session_slices.drop_user_resources()
