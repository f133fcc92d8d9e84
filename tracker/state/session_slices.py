import streamlit as st


PREFIX = "slice"
RESOURCE_PREFIX = "resource"


def get_slice(slice_name):
    key = f"{PREFIX}.{slice_name}"
    if key not in st.session_state:
        st.session_state[key] = {}
    return st.session_state[key]


def get_value(slice_name, name, default=None):
    payload = get_slice(slice_name)
    return payload.get(name, default)


def set_value(slice_name, name, value):
    payload = get_slice(slice_name)
    payload[name] = value


def get_resource(name, factory):
    """Per-browser-session object (session manager, loaders), built on first use."""
    key = f"{RESOURCE_PREFIX}.{name}"
    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]


def drop_user_resources():
    for key in list(st.session_state.keys()):
        if key.startswith(f"{RESOURCE_PREFIX}.user.") or key.startswith(f"{PREFIX}."):
            del st.session_state[key]
