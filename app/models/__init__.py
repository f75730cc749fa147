"""
OKR Tracker
SQLAlchemy models package.

All model modules import the shared ``db`` handle from here:

    from app.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
