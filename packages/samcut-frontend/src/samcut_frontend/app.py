"""Streamlit application entry point."""

import streamlit as st

from samcut_frontend.pages import segment

st.set_page_config(
    page_title="samcut",
    page_icon="✂️",
    layout="wide",
)

st.title("samcut")

segment.render()
