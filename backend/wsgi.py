# backend/wsgi.py
from treasures import create_app

app = create_app()
