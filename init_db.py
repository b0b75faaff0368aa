"""
Create database tables and seed the built-in roles
Run once per environment: python init_db.py
"""
import logging

from bilgen import create_app
from bilgen.extensions import db
from bilgen.models import Role
from bilgen.utils import ADMIN, STUDENT, TEACHER

logger = logging.getLogger(__name__)


def init_database():
    app = create_app()

    with app.app_context():
        db.create_all()

        existing = {role.name for role in Role.query.all()}
        for name in (STUDENT, TEACHER, ADMIN):
            if name not in existing:
                db.session.add(Role(name=name))
                logger.info("Added role %s", name)
        db.session.commit()
        logger.info("Database ready")


if __name__ == '__main__':
    init_database()
