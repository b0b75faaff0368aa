"""
Routes Package
Exports all route blueprints
"""
from bilgen.routes.exams import exams_bp
from bilgen.routes.homework import homework_bp

__all__ = ['exams_bp', 'homework_bp']
