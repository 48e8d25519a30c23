"""Streamlit front end for the civic issue reporting API."""

__version__ = "1.0.0"
