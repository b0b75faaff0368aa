"""
Flask Extensions
Centralized extension initialization
"""
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions (without app binding)
db = SQLAlchemy()

# Key under app.extensions holding the exam content provider
CONTENT_PROVIDER_KEY = "bilgen.content_provider"
