"""
Captionist Application Package

Contains the Streamlit application organized into:
- config.py: Settings read from the environment
- state.py: Session state management
- main.py: Main entry point with page navigation
- pages/: Individual page modules
- services/canvas/: Annotation canvas session, layer store and graphics engines
"""
