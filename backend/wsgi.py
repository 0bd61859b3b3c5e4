# backend/wsgi.py
from salonflow import create_app

app = create_app()
