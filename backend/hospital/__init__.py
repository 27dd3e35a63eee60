"""Hospital records backend: patients, history, exams and user administration."""

__version__ = "0.4.0"
