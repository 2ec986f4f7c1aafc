"""
Streamlit pages for Captionist
"""
