import streamlit as st

from tracker import auth
from tracker.constants import CONTACT_METHODS
from tracker.errors import ApiError


def render_account_tab(ctx):
    repository = ctx["repository"]
    manager = ctx["session_manager"]
    profile = ctx.get("profile") or {}

    st.markdown("<div class='section-title'>Account</div>", unsafe_allow_html=True)
    user = manager.user or {}
    st.caption(f"Signed in as {user.get('email') or profile.get('username') or 'unknown'}")

    if profile.get("id"):
        contact = profile.get("preferred_contact_method") or CONTACT_METHODS[0]
        with st.form("account.form"):
            username = st.text_input("Username", value=profile.get("username") or "")
            phone = st.text_input("Phone", value=profile.get("phone") or "")
            method = st.selectbox(
                "Preferred contact",
                CONTACT_METHODS,
                index=CONTACT_METHODS.index(contact) if contact in CONTACT_METHODS else 0,
            )
            submitted = st.form_submit_button("Save")
        if submitted:
            if not username.strip():
                st.error("Please fill in all required fields")
            else:
                try:
                    updated = repository.update_user(
                        profile["id"],
                        {"username": username.strip(), "phone": phone.strip() or None, "preferred_contact_method": method},
                    )
                except ApiError as exc:
                    st.error(exc.message)
                else:
                    manager.update_profile(updated)
                    st.success("Account updated successfully")
    else:
        st.warning("User profile not found. Try logging out and back in.")

    if st.button("Log out", key="account.logout"):
        auth.logout()
        st.rerun()
