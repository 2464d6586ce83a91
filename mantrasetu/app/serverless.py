"""Serverless entrypoint for deploying the web client on Vercel."""
from __future__ import annotations
import os

from mantrasetu.app import create_app

app = create_app(os.getenv("FLASK_ENV"))
