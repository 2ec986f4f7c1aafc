"""
Captionist - caption and annotate stock photos

Run with: streamlit run app.py
"""
from captionist.main import main

main()
