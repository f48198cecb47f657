"""Run Streamlit frontend. Use from project root: python run_frontend.py"""
import subprocess
import sys

subprocess.run(
    [sys.executable, "-m", "streamlit", "run", "frontend/streamlit_app.py", "--server.port=8501"]
)
