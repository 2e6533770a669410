"""Application package for the VentureHub startup/investor backend.

This package exposes the service, repository and model modules used by
the FastAPI application. Startups and investors sign up, get moderated
by admins, browse each other's profiles and receive matchmaking and
newsletter notifications; admins also run a small blog. Individual
modules contain the concrete implementations and documentation.
"""
