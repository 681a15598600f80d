"""
Shared page setup and styling for the Streamlit pages
"""
import streamlit as st

from config import LAYOUT, PAGE_ICON, PAGE_TITLE


def setup_page(title, icon=PAGE_ICON):
    """Configure the browser tab and apply the shared style. Call first on every page."""
    st.set_page_config(
        page_title=f"{title} - {PAGE_TITLE}",
        page_icon=icon,
        layout=LAYOUT,
        initial_sidebar_state="expanded",
    )
    apply_minimal_style()


def apply_minimal_style():
    """Apply the minimal clean design CSS."""
    st.markdown("""
    <style>
        .main {
            padding: 3rem 5rem;
            max-width: 1400px;
        }

        h1 {
            font-size: 2.75rem;
            font-weight: 700;
            color: #1a1a1a;
            letter-spacing: -0.02em;
            margin-bottom: 0.25rem;
        }

        h3 {
            font-size: 1.2rem;
            font-weight: 600;
            color: #1a1a1a;
            margin-top: 2.5rem;
            margin-bottom: 1rem;
        }

        .stCaption {
            color: #6b6b6b;
            font-size: 0.9rem;
        }

        .stButton > button {
            background-color: #1f3a5f;
            color: white;
            border: none;
            border-radius: 4px;
            padding: 0.6rem 1.5rem;
            font-weight: 500;
        }

        .stButton > button:hover {
            background-color: #142842;
        }

        [data-testid="stSidebar"] {
            background-color: #f4f6f9;
        }
    </style>
    """, unsafe_allow_html=True)
