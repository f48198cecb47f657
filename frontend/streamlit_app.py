"""Support chat Streamlit frontend."""

from uuid import uuid4

import streamlit as st
from api_client import SupportChatClient

client = SupportChatClient()


def current_session_id() -> str:
    """Session id kept in the page URL so it survives reloads."""
    session_id = st.query_params.get("session")
    if not session_id:
        session_id = str(uuid4())
        st.query_params["session"] = session_id
    return session_id


def switch_session(session_id: str) -> None:
    st.query_params["session"] = session_id
    st.session_state.loaded_session = None


def load_history(session_id: str) -> None:
    """Fetch the stored conversation once per session switch."""
    if st.session_state.get("loaded_session") != session_id:
        st.session_state.messages = client.fetch_conversation(session_id)
        st.session_state.loaded_session = session_id


def sidebar(session_id: str) -> None:
    st.sidebar.title("Support Assistant")
    st.sidebar.caption(f"Session `{session_id}`")
    if st.sidebar.button("New chat"):
        switch_session(str(uuid4()))
        st.rerun()

    st.sidebar.subheader("Previous chats")
    for s in client.fetch_sessions():
        if s.get("id") == session_id:
            continue
        if st.sidebar.button(s["id"], key=f"session-{s['id']}"):
            switch_session(s["id"])
            st.rerun()


def main():
    st.set_page_config(page_title="AI Support Assistant", page_icon="🤖")
    session_id = current_session_id()
    load_history(session_id)
    sidebar(session_id)

    st.title("🤖 AI Support Assistant")
    for msg in st.session_state.messages:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])

    if prompt := st.chat_input("Ask something..."):
        if not prompt.strip():
            return
        st.session_state.messages.append({"role": "user", "content": prompt})
        with st.chat_message("user"):
            st.markdown(prompt)

        with st.spinner("Assistant is typing..."):
            reply = client.send_message(session_id, prompt)
        if reply is not None:
            with st.chat_message("assistant"):
                st.markdown(reply)
            st.session_state.messages.append({"role": "assistant", "content": reply})


if __name__ == "__main__":
    main()
