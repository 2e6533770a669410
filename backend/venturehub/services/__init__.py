"""Business logic for the VentureHub API.

Each module holds one service class (plus its row projections) that
takes a SQLModel `Session`, talks to the repositories and raises
`errors.ServiceError` subclasses on failure.
"""
