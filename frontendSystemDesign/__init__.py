"""Django project package for the Frontend System Design learning site."""
