# Entry point: streamlit run streamlit_app.py
from survey_portal.app.main import main

main()
